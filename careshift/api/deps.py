from fastapi import Request

from careshift.services.webhook import WebhookClient


def get_webhook_client(request: Request) -> WebhookClient:
    """The webhook client created for this application's lifetime."""
    return request.app.state.webhook_client


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")
