from .client import WebhookClient, WebhookPayload, WebhookResult

__all__ = [
    "WebhookClient",
    "WebhookPayload",
    "WebhookResult",
]
