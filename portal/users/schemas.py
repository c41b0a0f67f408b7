from pydantic import Field, field_validator
from typing import Optional

from portal.api.schemas import ApiModel, Record
from portal.core.forms import require_email, require_text


class StandardUser(Record):
    name: str
    email: str
    phone: Optional[str] = None
    profile_image: Optional[str] = Field(None, alias="profileImage")
    is_verified: bool = Field(False, alias="isVerified")
    is_active: bool = Field(True, alias="isActive")
    last_login: Optional[str] = Field(None, alias="lastLogin")


# EDIT FORM (users register themselves, admins only edit)
class UserDraft(ApiModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return require_email(v)
