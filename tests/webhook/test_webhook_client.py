import httpx
import pytest
from pydantic import ValidationError

from careshift.services.webhook import WebhookClient


WEBHOOK_URL = "https://hooks.example.com/catch/1"


def make_payload(week_id: str = "2024-W18") -> dict:
    return {
        "week_id": week_id,
        "start_date": "2024-04-29",
        "end_date": "2024-05-05",
        "assignments": [{"shiftId": "s1", "employeeId": "emp1"}],
        "totalsByEmployee": {},
        "issues": [],
    }


def make_client(responses, url=WEBHOOK_URL, max_attempts=3):
    """Build a client whose transport replays `responses` in order."""
    calls = []
    sleeps = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        outcome = queue.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    client = WebhookClient(
        url,
        max_attempts=max_attempts,
        backoff=0.25,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=sleeps.append,
    )
    return client, calls, sleeps


class TestDelivery:

    def test_posts_payload_as_json(self):
        client, calls, sleeps = make_client([httpx.Response(200, text="ok")])

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status, result.text) == (True, 200, "ok")
        assert len(calls) == 1
        assert calls[0].method == "POST"
        assert str(calls[0].url) == WEBHOOK_URL
        assert b'"week_id":"2024-W18"' in calls[0].content.replace(b" ", b"")
        assert sleeps == []

    def test_retries_server_errors_then_succeeds(self):
        client, calls, sleeps = make_client([
            httpx.Response(502),
            httpx.Response(503),
            httpx.Response(200, text="ok"),
        ])

        result = client.post_schedule(make_payload())

        assert result.ok is True
        assert len(calls) == 3
        assert sleeps == [0.25, 0.5]

    def test_gives_up_after_max_attempts(self):
        client, calls, sleeps = make_client([httpx.Response(500)] * 3)

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status) == (False, 500)
        assert result.text == "Zapier webhook failed after retries"
        assert len(calls) == 3
        assert sleeps == [0.25, 0.5]

    def test_client_errors_are_not_retried(self):
        client, calls, sleeps = make_client([httpx.Response(400, text="bad payload")])

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status, result.text) == (False, 400, "bad payload")
        assert len(calls) == 1
        assert sleeps == []

    def test_transport_error_reports_status_zero(self):
        error = httpx.ConnectError("connection refused")
        client, calls, sleeps = make_client([error, error], max_attempts=2)

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status) == (False, 0)
        assert "connection refused" in result.text
        assert len(calls) == 2
        assert sleeps == [0.25]

    def test_transport_error_then_success(self):
        client, calls, sleeps = make_client(
            [httpx.ConnectTimeout("timed out"), httpx.Response(204)],
        )

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status) == (True, 204)
        assert sleeps == [0.25]


class TestDeduplication:

    def test_second_post_for_same_week_is_skipped(self):
        client, calls, _ = make_client([httpx.Response(200)])

        client.post_schedule(make_payload())
        result = client.post_schedule(make_payload())

        assert (result.ok, result.status, result.text) == (True, 204, "Duplicate week skipped")
        assert len(calls) == 1

    def test_force_reposts(self):
        client, calls, _ = make_client([httpx.Response(200), httpx.Response(200)])

        client.post_schedule(make_payload())
        result = client.post_schedule(make_payload(), force=True)

        assert result.status == 200
        assert len(calls) == 2

    def test_failed_week_is_not_recorded(self):
        client, calls, _ = make_client([httpx.Response(422), httpx.Response(200)])

        client.post_schedule(make_payload())
        result = client.post_schedule(make_payload())

        assert result.status == 200
        assert client.posted_weeks == {"2024-W18"}

    def test_different_weeks_both_post(self):
        client, calls, _ = make_client([httpx.Response(200), httpx.Response(200)])

        client.post_schedule(make_payload("2024-W18"))
        client.post_schedule(make_payload("2024-W19"))

        assert len(calls) == 2

    def test_weeks_are_per_client(self):
        first, _, _ = make_client([httpx.Response(200)])
        second, calls, _ = make_client([httpx.Response(200)])

        first.post_schedule(make_payload())
        second.post_schedule(make_payload())

        assert len(calls) == 1


class TestConfiguration:

    def test_missing_url(self):
        client = WebhookClient(None)

        result = client.post_schedule(make_payload())

        assert (result.ok, result.status) == (False, 0)
        assert result.text == "Missing Zapier webhook URL"
        assert client.is_configured is False

    def test_disabled_client_is_not_configured(self):
        assert WebhookClient(WEBHOOK_URL, enabled=False).is_configured is False
        assert WebhookClient(WEBHOOK_URL).is_configured is True

    @pytest.mark.parametrize("missing", ["week_id", "start_date", "assignments"])
    def test_invalid_payload_raises(self, missing):
        client, calls, _ = make_client([])
        payload = make_payload()
        del payload[missing]

        with pytest.raises(ValidationError):
            client.post_schedule(payload)
        assert calls == []

    def test_empty_week_id_raises(self):
        client, _, _ = make_client([])
        with pytest.raises(ValidationError):
            client.post_schedule(make_payload(week_id=""))

    def test_close_releases_http_client(self):
        client, _, _ = make_client([])
        client.close()
        client.close()
        assert client._client is None
