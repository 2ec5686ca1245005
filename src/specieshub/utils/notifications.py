"""Toast notifications queued in the user's session.

A view that redirects queues its notification with ``push_notification``; the
next rendered page drains the queue with ``pop_notifications``.
"""

from dataclasses import asdict, dataclass

from starlette.requests import HTTPConnection

SESSION_KEY = "notifications"


@dataclass
class Notification:
    """A short titled message shown to the user as a toast."""

    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"

    def as_dict(self) -> dict[str, str]:
        """Session-serialisable form of the notification."""
        return asdict(self)


def push_notification(conn: HTTPConnection, notification: Notification) -> None:
    """Queue a notification for the next page this session renders."""
    queued = list(conn.session.get(SESSION_KEY, []))
    queued.append(notification.as_dict())
    conn.session[SESSION_KEY] = queued


def pop_notifications(conn: HTTPConnection) -> list[Notification]:
    """Remove and return every queued notification."""
    if "session" not in conn.scope:
        return []
    queued = conn.session.pop(SESSION_KEY, [])
    return [Notification(**item) for item in queued]
