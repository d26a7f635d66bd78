"""Best-effort delivery of run events and operational logs."""

from .gateway import NotificationGateway

__all__ = ["NotificationGateway"]
