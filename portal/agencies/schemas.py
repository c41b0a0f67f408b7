from pydantic import AliasChoices, Field, field_validator
from typing import Optional

from portal.api.schemas import ApiModel, Record
from portal.core.forms import require_email, require_text


class Agency(Record):
    name: str
    description: Optional[str] = None
    email: Optional[str] = Field(None, validation_alias=AliasChoices("email", "contactEmail"))
    phone: Optional[str] = Field(None, validation_alias=AliasChoices("phone", "contactPhone"))
    address: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")


# ADD / EDIT FORM
class AgencyDraft(ApiModel):
    name: str = ""
    description: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    website: str = ""
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Agency name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return require_email(v)
