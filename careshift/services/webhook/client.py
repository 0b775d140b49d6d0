"""
Outbound webhook delivery.
Posts a generated schedule to the configured webhook with retries, and skips
weeks that were already delivered by this client.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, Field

from careshift.core.config import settings


logger = logging.getLogger(__name__)


class WebhookPayload(BaseModel):
    week_id: str = Field(min_length=1)
    start_date: str = Field(min_length=1)
    end_date: str = Field(min_length=1)
    assignments: list[Any]
    totalsByEmployee: dict[str, Any]
    issues: list[Any]


@dataclass
class WebhookResult:
    ok: bool
    status: int
    text: str = ""


class WebhookClient:
    """
    One instance per application lifetime; posted_weeks lives as long as the
    client does.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        enabled: bool = True,
        timeout: float = 5.0,
        max_attempts: int = 3,
        backoff: float = 0.25,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = url
        self.enabled = enabled
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff = backoff
        self.posted_weeks: set[str] = set()
        self._client = client
        self._sleep = sleep

    @classmethod
    def from_settings(cls, config=settings, **kwargs) -> "WebhookClient":
        return cls(
            config.ZAPIER_WEBHOOK_URL,
            enabled=config.ZAPIER_ENABLED,
            timeout=config.WEBHOOK_TIMEOUT_SECONDS,
            max_attempts=config.WEBHOOK_MAX_ATTEMPTS,
            backoff=config.WEBHOOK_BACKOFF_SECONDS,
            **kwargs,
        )

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.url)

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def post_schedule(self, payload: dict, force: bool = False) -> WebhookResult:
        """
        Deliver a schedule payload.

        Raises:
            pydantic.ValidationError: if the payload is missing required fields
        """
        parsed = WebhookPayload.model_validate(payload)

        if not force and parsed.week_id in self.posted_weeks:
            return WebhookResult(ok=True, status=204, text="Duplicate week skipped")

        if not self.url:
            return WebhookResult(ok=False, status=0, text="Missing Zapier webhook URL")

        body = parsed.model_dump(mode="json")

        for attempt in range(self.max_attempts):
            is_last = attempt == self.max_attempts - 1
            try:
                response = self._http().post(self.url, json=body, timeout=self.timeout)
            except httpx.HTTPError as e:
                logger.error(f"Webhook error (attempt {attempt + 1}): {e}")
                if is_last:
                    return WebhookResult(ok=False, status=0, text=str(e) or type(e).__name__)
                self._sleep(self.backoff * 2 ** attempt)
                continue

            if response.status_code < 500:
                if response.is_success:
                    self.posted_weeks.add(parsed.week_id)
                return WebhookResult(
                    ok=response.is_success,
                    status=response.status_code,
                    text=response.text,
                )

            logger.warning(
                f"Webhook failed (attempt {attempt + 1}): {response.status_code} - {response.text}"
            )
            if not is_last:
                self._sleep(self.backoff * 2 ** attempt)

        return WebhookResult(ok=False, status=500, text="Zapier webhook failed after retries")
