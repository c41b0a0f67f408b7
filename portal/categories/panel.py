"""
Complaint categories. Categories form a two-level tree: a category with no
parent is a main category and may own sub-categories. Payloads are JSON,
there is nothing to upload.
"""

from typing import Any, Callable, Dict, List, Optional

from portal.api.schemas import Envelope
from portal.categories.schemas import COLOR_OPTIONS, Category, CategoryDraft
from portal.core.filters import contains_text
from portal.core.modals import ModalKind
from portal.core.panel import ClientFilteredPanel


class CategoryPanel(ClientFilteredPanel[Category, CategoryDraft]):
    endpoint = "/api/admin/categories"
    entity = Category
    draft = CategoryDraft
    label = "category"
    plural = "categories"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # "", "parent", "child" or the id of a main category
        self.parent_filter = ""

    def query_params(self) -> Dict[str, Any]:
        return {"adminId": self.context.admin_id}

    def set_parent_filter(self, choice: str) -> None:
        self.parent_filter = choice or ""

    def matches_search(self, category: Category) -> bool:
        term = self.search_term
        return contains_text(category.name, term) or contains_text(category.description, term)

    def matches_parent(self, category: Category) -> bool:
        choice = self.parent_filter
        if not choice:
            return True
        if choice == "parent":
            return category.parent_category is None
        if choice == "child":
            return category.parent_category is not None
        return category.parent_id == choice

    def predicates(self) -> List[Callable[[Category], bool]]:
        return super().predicates() + [self.matches_parent]

    # LOOKUPS
    @property
    def parent_categories(self) -> List[Category]:
        return [c for c in self.store.items if c.parent_category is None]

    def parent_options(self) -> List[Category]:
        """Main categories a draft may hang under (never the category being edited)."""
        return [c for c in self.parent_categories if c.id != self.form.target_id]

    def category_name(self, category_id: Optional[str]) -> str:
        if not category_id:
            return "None"
        category = self.get(category_id)
        return category.name if category else "Unknown"

    def parent_name(self, category: Category) -> Optional[str]:
        if category.parent_category is None:
            return None
        if isinstance(category.parent_category, str):
            return self.category_name(category.parent_category)
        return category.parent_category.name

    def delete_warning(self) -> Optional[str]:
        if self.modal.kind != ModalKind.DELETE:
            return None
        count = len(self.modal.target.sub_categories)
        if not count:
            return None
        return f"This category has {count} subcategories that will also be deleted."

    # FORM
    def draft_defaults(self) -> Dict[str, Any]:
        return {"color": COLOR_OPTIONS[0]}

    def draft_values(self, category: Category) -> Dict[str, Any]:
        return {
            "name": category.name,
            "description": category.description or "",
            "icon": category.icon or "",
            "color": category.color or COLOR_OPTIONS[0],
            "is_active": category.is_active,
            "parent_category": category.parent_id or "",
        }

    def form_fields(self, draft: CategoryDraft) -> Dict[str, Any]:
        return {
            "name": draft.name,
            "description": draft.description,
            "icon": draft.icon,
            "color": draft.color,
            "isActive": draft.is_active,
            "parentCategory": draft.parent_category,
        }

    async def send_draft(self, creating: bool) -> Envelope:
        body = self.form_fields(self.form.draft)
        body.update(self.context.audit("created" if creating else "updated"))
        if creating:
            return await self.api.post(self.endpoint, json=body)
        return await self.api.put(f"{self.endpoint}/{self.form.target_id}", json=body)
