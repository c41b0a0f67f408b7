"""
The anonymous user's portal: complaints and notifications tabs, a
submission form, and an unread badge kept fresh by polling.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from portal.api.client import ApiClient
from portal.authentication.schemas import SessionData, SessionRole
from portal.authentication.utils import require_session
from portal.complaints.submit import ComplaintForm
from portal.complaints.tracker import ComplaintTracker
from portal.config import get_settings
from portal.core.timing import Poller
from portal.core.toasts import Toaster
from portal.exceptions import ApiError, SessionRequired
from portal.notifications.center import NotificationCenter

logger = logging.getLogger(__name__)


class PortalTab(str, Enum):
    COMPLAINTS = "complaints"
    NOTIFICATIONS = "notifications"


class AnonymousPortal:
    unread_endpoint = "/api/anonymous/notifications/unread-count"

    def __init__(
        self,
        api: ApiClient,
        toaster: Optional[Toaster] = None,
        navigate: Optional[Callable[[str], None]] = None,
        session_path=None,
        poll_interval: Optional[float] = None,
    ):
        self.api = api
        self.toaster = toaster or Toaster()
        self._navigate = navigate
        self.session_path = session_path
        self.session: Optional[SessionData] = None
        self.location: Optional[str] = None

        self.tab = PortalTab.COMPLAINTS
        self.unread_count = 0
        self.complaints = ComplaintTracker(api, self.toaster)
        self.notifications = NotificationCenter(api, self.toaster, on_unread_count=self.update_unread_count)
        self.submission = ComplaintForm(api, self.toaster)
        self.show_submission = False

        interval = get_settings().UNREAD_POLL_SECONDS if poll_interval is None else poll_interval
        self.poller = Poller(interval, self.fetch_unread_count)

    def navigate(self, path: str) -> None:
        self.location = path
        if self._navigate is not None:
            self._navigate(path)

    def check_session(self) -> bool:
        try:
            self.session = require_session(SessionRole.ANONYMOUS_USER, self.session_path)
        except SessionRequired as exc:
            logger.info("Redirecting to %s: %s", exc.redirect_to, exc.message)
            self.navigate(exc.redirect_to)
            return False
        return True

    async def start(self) -> bool:
        """Mount: session guard, then the complaints tab and the unread poller."""
        if not self.check_session():
            return False
        self.poller.start()
        await self.complaints.refresh()
        return True

    async def stop(self) -> None:
        await self.poller.stop()

    async def fetch_unread_count(self) -> None:
        try:
            envelope = await self.api.get(self.unread_endpoint)
        except ApiError as exc:
            logger.error("Error fetching unread notifications count: %s", exc.server_message or exc.status_code)
            return
        if envelope.success and isinstance(envelope.data, dict):
            self.update_unread_count(envelope.data.get("count") or 0)
        elif envelope.success:
            logger.warning("Unexpected unread count payload: %r", envelope.data)

    def update_unread_count(self, count: int) -> None:
        self.unread_count = count

    async def switch_tab(self, tab: str) -> None:
        self.tab = PortalTab(tab)
        if self.tab == PortalTab.COMPLAINTS:
            await self.complaints.refresh()
        else:
            await self.notifications.refresh()

    async def open_submission(self) -> None:
        self.show_submission = True
        await self.submission.load_categories()

    def close_submission(self) -> None:
        self.show_submission = False
        self.submission.reset()

    async def submit_complaint(self) -> Optional[str]:
        tracking_id = await self.submission.submit()
        if tracking_id is not None:
            self.show_submission = False
            await self.complaints.refresh()
        return tracking_id
