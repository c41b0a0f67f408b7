"""
Agency management: full list fetched once, filtered locally by name/email
and active status. Create/update go out as multipart so a logo can ride
along.
"""

from typing import Any, Dict, Optional

from portal.agencies.schemas import Agency, AgencyDraft
from portal.core.files import FileUpload
from portal.core.filters import contains_text
from portal.core.panel import ClientFilteredPanel


class AgencyPanel(ClientFilteredPanel[Agency, AgencyDraft]):
    endpoint = "/api/admin/agencies"
    entity = Agency
    draft = AgencyDraft
    label = "agency"
    plural = "agencies"
    image_field = "logo"

    def query_params(self) -> Dict[str, Any]:
        return {"adminId": self.context.admin_id}

    def matches_search(self, agency: Agency) -> bool:
        return contains_text(agency.name, self.search_term) or contains_text(agency.email, self.search_term)

    def draft_values(self, agency: Agency) -> Dict[str, Any]:
        return {
            "name": agency.name,
            "description": agency.description or "",
            "email": agency.email or "",
            "phone": agency.phone or "",
            "address": agency.address or "",
            "website": agency.website or "",
            "is_active": agency.is_active,
        }

    def image_url(self, agency: Agency) -> Optional[str]:
        return agency.logo

    def choose_logo(self, file: Optional[FileUpload]) -> bool:
        return self.form.attach_image(file, field="logo")

    def form_fields(self, draft: AgencyDraft) -> Dict[str, Any]:
        return {
            "name": draft.name,
            "description": draft.description,
            "email": draft.email,
            "phone": draft.phone,
            "address": draft.address,
            "website": draft.website,
            "isActive": draft.is_active,
        }
