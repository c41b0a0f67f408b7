"""
The CRUD resource panel: store + filters + form + modal + actions for one
entity type, talking to one admin endpoint.

`ClientFilteredPanel` fetches the whole list once and filters locally;
`ServerPagedPanel` sends search/filter/sort/page to the server and refetches
on every change, debouncing search input.
"""

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from portal.api.client import ApiClient, MultipartFile
from portal.api.schemas import Envelope, Record
from portal.authentication.schemas import AdminProfile
from portal.config import get_settings
from portal.core.actions import ActionDispatcher
from portal.core.filters import PageState, SortState, apply_filters, matches_flag, parse_status_filter
from portal.core.forms import FormController
from portal.core.modals import ModalKind, ModalOrchestrator
from portal.core.store import ResourceStore
from portal.core.timing import Debouncer
from portal.core.toasts import Toaster
from portal.exceptions import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)
D = TypeVar("D", bound=BaseModel)

CRUD_MODALS = (ModalKind.ADD, ModalKind.EDIT, ModalKind.DELETE, ModalKind.VIEW)


class AdminContext:
    """
    Who is operating the panels. Passed into every panel so mutating
    requests can carry audit fields for server-side logging.
    """

    def __init__(self, profile: Optional[AdminProfile] = None):
        self.profile = profile

    @property
    def admin_id(self) -> Optional[str]:
        return self.profile.id if self.profile else None

    @property
    def admin_name(self) -> Optional[str]:
        return self.profile.name if self.profile else None

    def audit(self, verb: str) -> Dict[str, str]:
        """`{createdBy, createdByName}` style fields for `verb` ("created", "updated", "deleted")."""
        if self.profile is None:
            return {}
        return {f"{verb}By": self.profile.id, f"{verb}ByName": self.profile.name}

    def admin_fields(self) -> Dict[str, str]:
        """`{adminId, adminName}`, the audit shape the users endpoints take."""
        if self.profile is None:
            return {}
        return {"adminId": self.profile.id, "adminName": self.profile.name}


class ResourcePanel(Generic[T, D]):
    endpoint: str
    entity: Type[T]
    draft: Type[D]
    label: str
    plural: str
    modal_kinds: Tuple[ModalKind, ...] = CRUD_MODALS
    # multipart field name of the optional image upload
    image_field: Optional[str] = None

    def __init__(self, api: ApiClient, context: Optional[AdminContext] = None, toaster: Optional[Toaster] = None):
        self.api = api
        self.context = context or AdminContext()
        self.toaster = toaster or Toaster()
        self.store: ResourceStore[T] = ResourceStore(
            self.fetch,
            self.entity.model_validate,
            error_message=f"An error occurred while fetching {self.plural}",
            toast_message=f"Failed to load {self.plural}",
            toaster=self.toaster,
        )
        self.form: FormController[D] = FormController(self.draft, self.draft_defaults)
        self.modal: ModalOrchestrator[T] = ModalOrchestrator(self.modal_kinds, on_close=self.form.reset)
        self.actions = ActionDispatcher(self.toaster, self.refresh)

    @property
    def title(self) -> str:
        return self.label[:1].upper() + self.label[1:]

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    def query_params(self) -> Dict[str, Any]:
        return {}

    async def fetch(self, params: Dict[str, Any]) -> Envelope:
        return await self.api.get(self.endpoint, params=params)

    async def refresh(self) -> bool:
        return await self.store.refresh(self.query_params())

    async def load(self) -> None:
        """Initial fetch when the panel is first shown."""
        await self.refresh()

    @property
    def items(self) -> List[T]:
        return self.store.items

    @property
    def visible(self) -> List[T]:
        return list(self.store.items)

    @property
    def loading(self) -> bool:
        return self.store.loading or self.actions.busy

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    def get(self, entity_id: str) -> Optional[T]:
        return self.store.find(lambda item: item.id == entity_id)

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------
    def draft_defaults(self) -> Dict[str, Any]:
        return {}

    def draft_values(self, entity: T) -> Dict[str, Any]:
        raise NotImplementedError

    def image_url(self, entity: T) -> Optional[str]:
        return None

    def form_fields(self, draft: D) -> Dict[str, Any]:
        """Wire fields for the create/update request."""
        raise NotImplementedError

    def files(self) -> List[MultipartFile]:
        if self.image_field and self.form.image is not None:
            return [self.form.image.as_multipart(self.image_field)]
        return []

    async def send_draft(self, creating: bool) -> Envelope:
        fields = self.form_fields(self.form.draft)
        fields.update(self.context.audit("created" if creating else "updated"))
        if creating:
            return await self.api.send_form("POST", self.endpoint, fields, self.files())
        return await self.api.send_form("PUT", f"{self.endpoint}/{self.form.target_id}", fields, self.files())

    # ------------------------------------------------------------------
    # Modals
    # ------------------------------------------------------------------
    def open_add(self) -> None:
        self.modal.open(ModalKind.ADD)
        self.form.reset()

    def open_edit(self, entity: T) -> None:
        self.modal.open(ModalKind.EDIT, entity)
        self.form.load(entity.id, self.draft_values(entity), image_url=self.image_url(entity))

    def open_delete(self, entity: T) -> None:
        self.modal.open(ModalKind.DELETE, entity)

    def open_view(self, entity: T) -> None:
        self.modal.open(ModalKind.VIEW, entity)

    def close(self) -> None:
        self.modal.close()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def submit(self) -> bool:
        """Validate and send the open add/edit form. False when blocked or rejected."""
        if self.modal.kind not in (ModalKind.ADD, ModalKind.EDIT):
            raise RuntimeError("No add/edit form is open")
        if not self.form.validate():
            return False

        creating = self.form.creating
        verb, done, doing = ("add", "added", "adding") if creating else ("update", "updated", "updating")
        self.actions.busy = True
        try:
            envelope = await self.send_draft(creating)
        except ApiError as exc:
            logger.error("Error saving %s: %s", self.label, exc.server_message or exc.status_code)
            self.form.apply_server_error(exc)
            self.toaster.error(exc.message_or(f"An error occurred while {doing} the {self.label}"))
            return False
        finally:
            self.actions.busy = False

        if not envelope.success:
            self.toaster.error(envelope.message or f"Failed to {verb} {self.label}")
            return False

        self.toaster.success(f"{self.title} {done} successfully")
        self.modal.close()
        await self.refresh()
        return True

    async def delete(self) -> bool:
        """Delete the target of the open delete modal."""
        if self.modal.kind != ModalKind.DELETE:
            raise RuntimeError("Delete modal is not open")
        target = self.modal.target
        envelope = await self.actions.dispatch(
            lambda: self.api.delete(f"{self.endpoint}/{target.id}", json=self.context.audit("deleted") or None),
            success=f"{self.title} deleted successfully",
            failure=f"Failed to delete {self.label}",
            fallback=f"An error occurred while deleting the {self.label}",
        )
        if envelope is None:
            return False
        self.modal.close()
        return True

    def status_audit(self) -> Dict[str, Any]:
        return self.context.audit("updated")

    async def toggle_status(self, entity: T) -> bool:
        currently_active = entity.is_active
        body = {"isActive": not currently_active, **self.status_audit()}
        envelope = await self.actions.dispatch(
            lambda: self.api.put(f"{self.endpoint}/{entity.id}/toggle-status", json=body),
            success=f"{self.title} {'deactivated' if currently_active else 'activated'} successfully",
            failure=f"Failed to update {self.label} status",
            fallback=f"An error occurred while updating {self.label} status",
        )
        return envelope is not None


class ClientFilteredPanel(ResourcePanel[T, D]):
    """Whole list fetched once; search and status filters run locally."""

    def __init__(self, api: ApiClient, context: Optional[AdminContext] = None, toaster: Optional[Toaster] = None):
        super().__init__(api, context, toaster)
        self.search_term = ""
        self.active_filter: Optional[bool] = None

    def set_search(self, term: str) -> None:
        self.search_term = term

    def set_status_filter(self, choice: str) -> None:
        """Accepts "all", "active" or "inactive"."""
        self.active_filter = parse_status_filter(choice)

    def matches_search(self, entity: T) -> bool:
        raise NotImplementedError

    def predicates(self) -> List[Callable[[T], bool]]:
        return [
            self.matches_search,
            lambda entity: matches_flag(entity.is_active, self.active_filter),
        ]

    @property
    def visible(self) -> List[T]:
        return apply_filters(self.store.items, *self.predicates())


class ServerPagedPanel(ResourcePanel[T, D]):
    """Search, filters, sort and page live on the server; each change refetches."""

    sortable = False

    def __init__(
        self,
        api: ApiClient,
        context: Optional[AdminContext] = None,
        toaster: Optional[Toaster] = None,
        *,
        page_size: Optional[int] = None,
        search_delay: Optional[float] = None,
    ):
        super().__init__(api, context, toaster)
        settings = get_settings()
        self.search = ""
        self.page = PageState(limit=page_size or settings.DEFAULT_PAGE_SIZE)
        self.sort = SortState()
        delay = settings.SEARCH_DEBOUNCE_SECONDS if search_delay is None else search_delay
        self._search_debouncer = Debouncer(delay, self._run_search)

    def filter_params(self) -> Dict[str, Any]:
        return {}

    def query_params(self) -> Dict[str, Any]:
        params = self.page.to_params()
        if self.sortable:
            params.update(self.sort.to_params())
        if self.search:
            params["search"] = self.search
        params.update(self.filter_params())
        return params

    async def refresh(self) -> bool:
        ok = await super().refresh()
        if ok:
            self.page.update_from(self.store.pagination, self.store.last_envelope.total)
        return ok

    @property
    def visible(self) -> List[T]:
        return self.store.items[: self.page.limit]

    def set_search(self, term: str) -> None:
        """Record the search text; the fetch fires once typing pauses."""
        self.search = term
        self._search_debouncer.trigger()

    async def _run_search(self) -> None:
        self.page.page = 1
        await self.refresh()

    async def settle(self) -> None:
        """Wait for a pending debounced search to run."""
        await self._search_debouncer.wait()

    async def filters_changed(self) -> bool:
        self.page.page = 1
        return await self.refresh()

    async def sort_by(self, field: str) -> bool:
        self.sort.toggle(field)
        return await self.refresh()

    async def go_to_page(self, page: int) -> bool:
        self.page.page = self.page.clamp(page)
        return await self.refresh()

    async def set_page_size(self, limit: int) -> bool:
        self.page.limit = limit
        return await self.filters_changed()
