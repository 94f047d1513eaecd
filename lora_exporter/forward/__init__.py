from .forwarder import WebhookForwarder

__all__ = ["WebhookForwarder"]
