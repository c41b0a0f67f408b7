from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any, Optional


class ApiModel(BaseModel):
    """Base for every model mirrored from the API (camelCase / `_id` on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Pagination(ApiModel):
    page: int = 1
    limit: int = 10
    total: int = 0
    # staff/users endpoints say totalPages, anonymous endpoints say pages
    total_pages: int = Field(1, validation_alias=AliasChoices("totalPages", "pages", "total_pages"))


class Envelope(ApiModel):
    """`{success, data?, message?, pagination?}` wrapper used by every endpoint."""

    success: bool = False
    data: Any = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None
    total: Optional[int] = None
    field: Optional[str] = None
    access_code: Optional[str] = Field(None, alias="accessCode")


class Record(ApiModel):
    """Anything the API hands back with a Mongo `_id` and timestamps."""

    id: str = Field(alias="_id")
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class Ref(ApiModel):
    """An embedded `{_id, name}` reference (agency on an agent, category on a complaint)."""

    id: str = Field(alias="_id")
    name: Optional[str] = None
