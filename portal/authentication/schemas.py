from pydantic import Field
from enum import Enum
from typing import Any, Dict, Optional

from portal.api.schemas import ApiModel


# ROLES STORED WITH THE SESSION
class SessionRole(str, Enum):
    ANONYMOUS_USER = "anonymous_user"
    STANDARD_USER = "standard_user"
    AGENT = "agent"
    ADMIN = "admin"


# LOGGED-IN ADMINISTRATOR (GET /api/admin/profile)
class AdminProfile(ApiModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    role: str
    profile_image: Optional[str] = Field(None, alias="profileImage")
    last_login: Optional[str] = Field(None, alias="lastLogin")


# PERSISTED SESSION (token + cached user data)
class SessionData(ApiModel):
    token: str
    user_data: Dict[str, Any] = Field(default_factory=dict, alias="userData")

    @property
    def role(self) -> Optional[str]:
        return self.user_data.get("role")
