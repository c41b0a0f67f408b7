"""
Agent management. Agents belong to an agency, so the panel keeps the agency
list around for the form dropdown and the agency filter.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from portal.agents.schemas import Agent, AgentDraft, AgencyOption
from portal.api.client import ApiClient
from portal.core.files import FileUpload
from portal.core.filters import contains_text
from portal.core.panel import AdminContext, ClientFilteredPanel
from portal.core.toasts import Toaster
from portal.exceptions import ApiError

logger = logging.getLogger(__name__)

AGENCIES_ENDPOINT = "/api/admin/agencies"


class AgentPanel(ClientFilteredPanel[Agent, AgentDraft]):
    endpoint = "/api/admin/agents"
    entity = Agent
    draft = AgentDraft
    label = "agent"
    plural = "agents"
    image_field = "profileImage"

    def __init__(self, api: ApiClient, context: Optional[AdminContext] = None, toaster: Optional[Toaster] = None):
        # draft_defaults reads this during the base constructor
        self.agencies: List[AgencyOption] = []
        super().__init__(api, context, toaster)
        self.agency_filter: Optional[str] = None

    async def load_agencies(self) -> bool:
        try:
            envelope = await self.api.get(AGENCIES_ENDPOINT)
        except ApiError as exc:
            logger.error("Error fetching agencies: %s", exc.server_message or exc.status_code)
            self.toaster.error("Failed to load agencies")
            return False
        if not envelope.success:
            self.toaster.error(envelope.message or "Could not load agencies")
            return False
        self.agencies = [AgencyOption.model_validate(row) for row in envelope.data or []]
        return True

    async def load(self) -> None:
        """Initial mount: agents and agency options."""
        await self.refresh()
        await self.load_agencies()

    # FILTERS
    def set_agency_filter(self, agency_id: Optional[str]) -> None:
        self.agency_filter = agency_id or None

    def matches_search(self, agent: Agent) -> bool:
        term = self.search_term
        if not term:
            return True
        # phone numbers are matched as typed
        return (
            contains_text(agent.name, term)
            or contains_text(agent.email, term)
            or (agent.phone is not None and term in agent.phone)
        )

    def predicates(self) -> List[Callable[[Agent], bool]]:
        return super().predicates() + [
            lambda agent: self.agency_filter is None or (agent.agency is not None and agent.agency.id == self.agency_filter),
        ]

    # FORM
    def draft_defaults(self) -> Dict[str, Any]:
        return {"agency": self.agencies[0].id if self.agencies else ""}

    def draft_values(self, agent: Agent) -> Dict[str, Any]:
        return {
            "name": agent.name,
            "email": agent.email,
            "phone": agent.phone or "",
            "position": agent.position or "",
            "employee_id": agent.employee_id or "",
            "department": agent.department or "",
            "agency": agent.agency.id if agent.agency else "",
            "is_active": agent.is_active,
        }

    def image_url(self, agent: Agent) -> Optional[str]:
        return agent.profile_image

    def choose_image(self, file: Optional[FileUpload]) -> bool:
        return self.form.attach_image(file, field="profileImage")

    def form_fields(self, draft: AgentDraft) -> Dict[str, Any]:
        return {
            "name": draft.name,
            "email": draft.email,
            "phone": draft.phone,
            "position": draft.position,
            "employeeId": draft.employee_id,
            "department": draft.department,
            "agency": draft.agency,
            "isActive": draft.is_active,
        }

    # ACTIONS
    async def send_setup_email(self, agent: Agent) -> bool:
        envelope = await self.actions.dispatch(
            lambda: self.api.post(f"{self.endpoint}/{agent.id}/send-setup-email"),
            success="Account setup email sent successfully",
            failure="Failed to send setup email",
            fallback="An error occurred while sending setup email",
            refresh=False,
        )
        return envelope is not None

    async def generate_access_code(self, agent: Agent) -> bool:
        envelope = await self.actions.dispatch(
            lambda: self.api.post(f"/api/admin/generate-access-code/agent/{agent.id}"),
            success="Access code generated and sent to agent's email",
            failure="Failed to generate access code",
            fallback="An error occurred while generating access code",
            refresh=False,
        )
        return envelope is not None
