from relay.models.notification import Notification

__all__ = ["Notification"]
