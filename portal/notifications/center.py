"""
The anonymous user's notification list.

Marking one notification read is applied locally before the server
answers and is never rolled back. Mark-all and delete only touch local
state once the server has confirmed them.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from portal.api.client import ApiClient
from portal.api.schemas import Envelope, Pagination
from portal.config import get_settings
from portal.core.filters import PageState
from portal.core.store import ResourceStore
from portal.core.toasts import Toaster
from portal.exceptions import ApiError
from portal.notifications.schemas import Notification

logger = logging.getLogger(__name__)


class NotificationFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    SYSTEM = "system"
    UPDATES = "updates"
    RESPONSES = "responses"


FILTER_PARAMS: Dict[NotificationFilter, Dict[str, Any]] = {
    NotificationFilter.ALL: {},
    NotificationFilter.UNREAD: {"read": False},
    NotificationFilter.SYSTEM: {"type": "system"},
    NotificationFilter.UPDATES: {"type": "status_change"},
    NotificationFilter.RESPONSES: {"type": "response_received"},
}


def extract_notifications(envelope: Envelope) -> Tuple[Sequence[Any], Optional[Pagination]]:
    data = envelope.data or {}
    pagination = data.get("pagination")
    return data.get("notifications") or [], Pagination.model_validate(pagination) if pagination else None


class NotificationCenter:
    endpoint = "/api/anonymous/notifications"

    def __init__(
        self,
        api: ApiClient,
        toaster: Optional[Toaster] = None,
        on_unread_count: Optional[Callable[[int], None]] = None,
        page_size: Optional[int] = None,
    ):
        self.api = api
        self.toaster = toaster or Toaster()
        self._on_unread_count = on_unread_count
        self.filter = NotificationFilter.ALL
        self.page = PageState(limit=page_size or get_settings().DEFAULT_PAGE_SIZE)
        self.unread_count = 0
        self.store: ResourceStore[Notification] = ResourceStore(
            lambda params: self.api.get(self.endpoint, params=params),
            Notification.model_validate,
            error_message="Failed to fetch notifications",
            extract=extract_notifications,
        )

    @property
    def notifications(self) -> List[Notification]:
        return self.store.items

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    def _report_unread(self, count: int) -> None:
        self.unread_count = max(count, 0)
        if self._on_unread_count is not None:
            self._on_unread_count(self.unread_count)

    def query_params(self) -> Dict[str, Any]:
        return {**self.page.to_params(), **FILTER_PARAMS[self.filter]}

    async def refresh(self) -> bool:
        ok = await self.store.refresh(self.query_params())
        if ok:
            self.page.update_from(self.store.pagination)
            unread = (self.store.last_envelope.data or {}).get("unreadCount")
            if unread is not None:
                self._report_unread(unread)
        return ok

    async def set_filter(self, choice: str) -> bool:
        self.filter = NotificationFilter(choice)
        self.page.page = 1
        return await self.refresh()

    async def go_to_page(self, page: int) -> bool:
        self.page.page = self.page.clamp(page)
        return await self.refresh()

    def get(self, notification_id: str) -> Optional[Notification]:
        return self.store.find(lambda n: n.id == notification_id)

    async def mark_as_read(self, notification_id: str) -> bool:
        notification = self.get(notification_id)
        if notification is None or notification.read:
            return False

        notification.read = True
        self._report_unread(self.unread_count - 1)
        try:
            envelope = await self.api.put(f"{self.endpoint}/{notification_id}/read")
        except ApiError as exc:
            # no toast and no rollback for this one
            logger.error("Error marking notification as read: %s", exc.server_message or exc.status_code)
            return False
        return envelope.success

    async def mark_all_as_read(self) -> bool:
        try:
            envelope = await self.api.put(f"{self.endpoint}/read-all")
        except ApiError as exc:
            logger.error("Error marking all notifications as read: %s", exc.server_message or exc.status_code)
            self.toaster.error("Failed to mark notifications as read")
            return False
        if not envelope.success:
            self.toaster.error(envelope.message or "Failed to mark notifications as read")
            return False

        for notification in self.store.items:
            notification.read = True
        self._report_unread(0)
        self.toaster.success("All notifications marked as read")
        return True

    async def delete(self, notification_id: str) -> bool:
        try:
            envelope = await self.api.delete(f"{self.endpoint}/{notification_id}")
        except ApiError as exc:
            logger.error("Error deleting notification: %s", exc.server_message or exc.status_code)
            self.toaster.error("Failed to delete notification")
            return False
        if not envelope.success:
            self.toaster.error(envelope.message or "Failed to delete notification")
            return False

        removed = self.get(notification_id)
        self.store.items = [n for n in self.store.items if n.id != notification_id]
        if removed is not None and not removed.read:
            self._report_unread(self.unread_count - 1)
        self.toaster.success("Notification deleted")
        return True
