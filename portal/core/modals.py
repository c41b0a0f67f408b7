"""
Single-active-modal state for a panel.

The panel is always in exactly one ModalState. Opening a modal while another
one is open closes the first (running the close hooks that wipe drafts and
previews) before the new one becomes active.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ModalKind(str, Enum):
    CLOSED = "closed"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    VIEW = "view"
    RESET_PASSWORD = "resetPassword"
    RESPOND = "respond"
    FEEDBACK = "feedback"


# kinds that act on an existing record
TARGETED = frozenset({ModalKind.EDIT, ModalKind.DELETE, ModalKind.VIEW, ModalKind.RESET_PASSWORD})


@dataclass(frozen=True)
class ModalState(Generic[T]):
    kind: ModalKind = ModalKind.CLOSED
    target: Optional[T] = None

    @property
    def is_open(self) -> bool:
        return self.kind != ModalKind.CLOSED


CLOSED = ModalState()


class ModalOrchestrator(Generic[T]):
    def __init__(self, kinds: Collection[ModalKind], on_close: Optional[Callable[[], None]] = None):
        self.kinds = frozenset(kinds)
        self.state: ModalState[T] = CLOSED
        self._close_hooks: List[Callable[[], None]] = [on_close] if on_close else []

    def add_close_hook(self, hook: Callable[[], None]) -> None:
        self._close_hooks.append(hook)

    def open(self, kind: ModalKind, target: Optional[T] = None) -> ModalState[T]:
        if kind not in self.kinds:
            raise ValueError(f"Modal {kind.value!r} is not available here")
        if kind in TARGETED and target is None:
            raise ValueError(f"Modal {kind.value!r} needs a target")
        if self.state.is_open:
            self.close()
        self.state = ModalState(kind=kind, target=target)
        return self.state

    def close(self) -> None:
        self.state = CLOSED
        for hook in self._close_hooks:
            hook()

    def is_showing(self, kind: ModalKind) -> bool:
        return self.state.kind == kind

    @property
    def kind(self) -> ModalKind:
        return self.state.kind

    @property
    def target(self) -> Optional[T]:
        return self.state.target

    def visibility(self) -> dict:
        """One flag per supported modal, the shape a view would bind to."""
        return {kind.value: self.state.kind == kind for kind in self.kinds}
