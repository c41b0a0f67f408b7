from pydantic import Field, field_validator
from typing import Optional

from portal.api.schemas import ApiModel, Record
from portal.core.forms import require_email, require_text


class AgencyOption(ApiModel):
    """The slice of an agency the agent form needs for its dropdown."""

    id: str = Field(alias="_id")
    name: str
    logo: Optional[str] = None


class Agent(Record):
    name: str
    email: str
    phone: Optional[str] = None
    profile_image: Optional[str] = Field(None, alias="profileImage")
    agency: Optional[AgencyOption] = None
    position: Optional[str] = None
    employee_id: Optional[str] = Field(None, alias="employeeId")
    department: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")


# ADD / EDIT FORM
class AgentDraft(ApiModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    position: str = ""
    employee_id: str = ""
    department: str = ""
    agency: str = ""
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return require_email(v)

    @field_validator("agency")
    @classmethod
    def validate_agency(cls, v):
        return require_text(v, "Please select an agency")
