from pydantic import Field, ValidationInfo, field_validator
from enum import Enum
from typing import Optional

from portal.api.schemas import ApiModel, Record
from portal.core.forms import MIN_PASSWORD_LENGTH, require_email, require_text


class StaffRole(str, Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    MODERATOR = "moderator"
    ANALYST = "analyst"


class Staff(Record):
    name: str
    email: str
    role: StaffRole
    profile_image: Optional[str] = Field(None, alias="profileImage")
    is_active: bool = Field(True, alias="isActive")
    last_login: Optional[str] = Field(None, alias="lastLogin")


# ADD / EDIT FORM
class StaffDraft(ApiModel):
    name: str = ""
    email: str = ""
    role: str = StaffRole.MODERATOR.value
    password: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name is required")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return require_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v, info: ValidationInfo):
        creating = bool(info.context and info.context.get("creating"))
        if creating and not v:
            raise ValueError("Password is required for new staff members")
        if v and len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return require_text(v, "Role is required")
