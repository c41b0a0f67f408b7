"""
The administrator shell: loads the signed-in admin's profile, switches
between the management views and owns logout.

Every view gets a fresh panel built with the admin context, the way the
browser remounts a component when its tab is chosen.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Union

from portal.agencies.panel import AgencyPanel
from portal.agents.panel import AgentPanel
from portal.api.client import ApiClient
from portal.authentication.schemas import AdminProfile
from portal.authentication.utils import clear_session
from portal.categories.panel import CategoryPanel
from portal.config import get_settings
from portal.core.panel import AdminContext, ResourcePanel
from portal.core.timing import run_later
from portal.core.toasts import Toaster
from portal.exceptions import ApiError
from portal.staff.panel import StaffPanel
from portal.stats.panel import StatsPanel
from portal.users.panel import UserPanel

logger = logging.getLogger(__name__)

Navigate = Callable[[str], None]
Panel = Union[ResourcePanel, StatsPanel]


class AdminView(str, Enum):
    DASHBOARD = "dashboard"
    STAFF = "staff"
    AGENCIES = "agencies"
    AGENTS = "agents"
    USERS = "users"
    CATEGORIES = "categories"


PANELS: Dict[AdminView, Callable[..., Panel]] = {
    AdminView.DASHBOARD: StatsPanel,
    AdminView.STAFF: StaffPanel,
    AdminView.AGENCIES: AgencyPanel,
    AdminView.AGENTS: AgentPanel,
    AdminView.USERS: UserPanel,
    AdminView.CATEGORIES: CategoryPanel,
}


class AdminDashboard:
    profile_endpoint = "/api/admin/profile"

    def __init__(
        self,
        api: ApiClient,
        toaster: Optional[Toaster] = None,
        navigate: Optional[Navigate] = None,
        session_path=None,
        logout_delay: Optional[float] = None,
    ):
        self.api = api
        self.toaster = toaster or Toaster()
        self._navigate = navigate
        self.session_path = session_path
        self.logout_delay = get_settings().LOGOUT_DELAY_SECONDS if logout_delay is None else logout_delay

        self.profile: Optional[AdminProfile] = None
        self.loading = False
        self.view = AdminView.DASHBOARD
        self.panel: Optional[Panel] = None
        self.location: Optional[str] = None
        self.pending_logout: Optional[asyncio.Task] = None

    @property
    def context(self) -> AdminContext:
        return AdminContext(self.profile)

    def navigate(self, path: str) -> None:
        self.location = path
        if self._navigate is not None:
            self._navigate(path)

    async def load_profile(self) -> bool:
        """Fetch the admin profile; an unusable session logs out after a short delay."""
        self.loading = True
        try:
            envelope = await self.api.get(self.profile_endpoint)
        except ApiError as exc:
            logger.error("Error fetching admin profile: %s", exc.server_message or exc.status_code)
            self.toaster.error("Session expired or invalid. Please login again.")
            self.pending_logout = run_later(self.logout_delay, self._expire_session)
            return False
        finally:
            self.loading = False

        if not envelope.success:
            self.toaster.error("Failed to load your profile")
            return False
        self.profile = AdminProfile.model_validate(envelope.data)
        return True

    async def _expire_session(self) -> None:
        clear_session(self.session_path)
        self.navigate("/login")

    async def start(self) -> bool:
        """Mount: profile first, then the default view."""
        ok = await self.load_profile()
        if ok:
            await self.show(self.view)
        return ok

    async def show(self, view: Union[AdminView, str]) -> Panel:
        self.view = AdminView(view)
        self.panel = PANELS[self.view](self.api, self.context, self.toaster)
        await self.panel.load()
        return self.panel

    def logout(self) -> None:
        clear_session(self.session_path)
        self.profile = None
        self.panel = None
        self.navigate("/login")
        self.toaster.info("You have been logged out")
