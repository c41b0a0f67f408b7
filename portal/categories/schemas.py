from pydantic import Field, field_validator
from typing import List, Optional, Union

from portal.api.schemas import ApiModel, Record, Ref
from portal.core.forms import require_text

ICON_OPTIONS = (
    "report",
    "infrastructure",
    "safety",
    "environment",
    "community",
    "transportation",
    "utilities",
    "health",
    "education",
    "other",
)

COLOR_OPTIONS = (
    "#3B82F6",  # blue
    "#EF4444",  # red
    "#10B981",  # green
    "#F59E0B",  # amber
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#6B7280",  # gray
    "#06B6D4",  # cyan
    "#14B8A6",  # teal
    "#F97316",  # orange
)


class Category(Record):
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")
    # a bare id or the populated parent
    parent_category: Optional[Union[str, Ref]] = Field(None, alias="parentCategory")
    sub_categories: List[Ref] = Field(default_factory=list, alias="subCategories")
    created_by: Optional[str] = Field(None, alias="createdBy")
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    @field_validator("parent_category", mode="before")
    @classmethod
    def blank_parent_is_none(cls, v):
        return v or None

    @property
    def parent_id(self) -> Optional[str]:
        if isinstance(self.parent_category, Ref):
            return self.parent_category.id
        return self.parent_category or None


# ADD / EDIT FORM
class CategoryDraft(ApiModel):
    name: str = ""
    description: str = ""
    icon: str = ""
    color: str = COLOR_OPTIONS[0]
    is_active: bool = True
    parent_category: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Category name is required")

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, v):
        if v and v not in ICON_OPTIONS:
            raise ValueError("Please choose one of the available icons")
        return v
