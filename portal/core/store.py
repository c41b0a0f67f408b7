"""
In-memory list of entities plus loading/error flags, refreshed by one fetch
call at a time.

There is no request cancellation: if two refreshes overlap,
whichever response arrives last is what the store ends up holding.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from pydantic import ValidationError

from portal.api.schemas import Envelope, Pagination
from portal.core.toasts import Toaster
from portal.exceptions import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[Dict[str, Any]], Awaitable[Envelope]]
Extractor = Callable[[Envelope], Tuple[Sequence[Any], Optional[Pagination]]]


def default_extract(envelope: Envelope) -> Tuple[Sequence[Any], Optional[Pagination]]:
    return envelope.data or [], envelope.pagination


class ResourceStore(Generic[T]):
    def __init__(
        self,
        fetcher: Fetcher,
        parse: Callable[[Any], T],
        *,
        error_message: str,
        toast_message: Optional[str] = None,
        toaster: Optional[Toaster] = None,
        extract: Extractor = default_extract,
    ):
        self._fetcher = fetcher
        self._parse = parse
        self._extract = extract
        self.error_message = error_message
        self.toast_message = toast_message
        self.toaster = toaster

        self.items: List[T] = []
        self.pagination: Optional[Pagination] = None
        self.last_envelope: Optional[Envelope] = None
        self.loading = False
        self.error: Optional[str] = None
        self.last_params: Dict[str, Any] = {}

    async def refresh(self, params: Optional[Dict[str, Any]] = None) -> bool:
        """Fetch with `params`; returns True when the list was replaced."""
        self.last_params = dict(params or {})
        self.loading = True
        self.error = None
        try:
            envelope = await self._fetcher(self.last_params)
        except ApiError as exc:
            logger.error("Fetch failed (%s): %s", self.error_message, exc.server_message)
            self._fail(exc.message_or(self.error_message))
            return False
        finally:
            self.loading = False

        if not envelope.success:
            self._fail(envelope.message or self.error_message)
            return False

        rows, pagination = self._extract(envelope)
        try:
            items = [self._parse(row) for row in rows]
        except ValidationError as exc:
            logger.error("Unexpected row shape (%s): %s", self.error_message, exc)
            self._fail(self.error_message)
            return False
        self.items = items
        self.pagination = pagination
        self.last_envelope = envelope
        return True

    async def retry(self) -> bool:
        """The manual "Try Again" button: same request as last time."""
        return await self.refresh(self.last_params)

    def _fail(self, message: str) -> None:
        # previous items stay visible
        self.error = message
        if self.toaster is not None and self.toast_message:
            self.toaster.error(self.toast_message)

    def find(self, predicate: Callable[[T], bool]) -> Optional[T]:
        return next((item for item in self.items if predicate(item)), None)
