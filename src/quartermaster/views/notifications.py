from dataclasses import dataclass, field
from datetime import UTC, datetime
from time import time
from typing import Dict, Literal, Optional
from uuid import uuid4

NoticeKind = Literal["success", "error", "warning", "info"]


@dataclass
class Notice:
    """One-shot toast shown on the next rendered page."""
    kind: NoticeKind
    text: str

    def as_dict(self) -> dict:
        return {"type": self.kind, "message": self.text}


@dataclass
class Notification:
    kind: NoticeKind
    title: str
    text: str
    id: str = field(default_factory=lambda: uuid4().hex)
    read: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind,
            "title": self.title,
            "message": self.text,
            "read": self.read,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class _Bucket:
    notices: list[Notice] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    touched_at: float = field(default_factory=time)


class NotificationStore:
    """
    In-memory per-browser notices and notification center, keyed by the
    session cookie. Intended for single-process deployments; idle buckets
    are purged after `ttl_seconds`.
    """

    def __init__(self, ttl_seconds: int = 86400, max_notifications: int = 50):
        self.ttl_seconds = ttl_seconds
        self.max_notifications = max_notifications
        self._buckets: Dict[str, _Bucket] = {}

    def _bucket(self, session_id: str) -> _Bucket:
        self._purge()
        bucket = self._buckets.setdefault(session_id, _Bucket())
        bucket.touched_at = time()
        return bucket

    def push(self, session_id: str, kind: NoticeKind, text: str) -> None:
        self._bucket(session_id).notices.append(Notice(kind=kind, text=text))

    def drain(self, session_id: str) -> list[Notice]:
        bucket = self._bucket(session_id)
        notices, bucket.notices = bucket.notices, []
        return notices

    def add(self, session_id: str, kind: NoticeKind, title: str, text: str) -> Notification:
        bucket = self._bucket(session_id)
        notification = Notification(kind=kind, title=title, text=text)
        bucket.notifications.insert(0, notification)
        del bucket.notifications[self.max_notifications:]
        return notification

    def notifications(self, session_id: str) -> list[Notification]:
        return list(self._bucket(session_id).notifications)

    def unread_count(self, session_id: str) -> int:
        return sum(1 for n in self._bucket(session_id).notifications if not n.read)

    def mark_read(self, session_id: str, notification_id: str) -> Optional[Notification]:
        for notification in self._bucket(session_id).notifications:
            if notification.id == notification_id:
                notification.read = True
                return notification
        return None

    def mark_all_read(self, session_id: str) -> None:
        for notification in self._bucket(session_id).notifications:
            notification.read = True

    def _purge(self) -> None:
        cutoff = time() - self.ttl_seconds
        stale = [sid for sid, bucket in self._buckets.items() if bucket.touched_at < cutoff]
        for sid in stale:
            self._buckets.pop(sid, None)
