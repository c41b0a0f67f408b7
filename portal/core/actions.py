"""
Fire-and-confirm side effects (status toggles, deletes, emails, codes).

Nothing is applied locally before the server answers. A confirmed action
toasts and triggers a full refetch; a failed one toasts and leaves state as
it was.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from portal.api.schemas import Envelope
from portal.core.toasts import Toaster
from portal.exceptions import ApiError

logger = logging.getLogger(__name__)


class ActionDispatcher:
    def __init__(self, toaster: Toaster, refresh: Optional[Callable[[], Awaitable[Any]]] = None):
        self.toaster = toaster
        self._refresh = refresh
        self.busy = False

    async def dispatch(
        self,
        request: Callable[[], Awaitable[Envelope]],
        *,
        success: str,
        failure: str,
        fallback: Optional[str] = None,
        refresh: bool = True,
    ) -> Optional[Envelope]:
        """
        Run `request` once.

        `failure` is shown when the server answers `success: false` without a
        message; `fallback` (defaulting to `failure`) when the request itself
        raised and the error carries no server message.
        """
        self.busy = True
        try:
            envelope = await request()
        except ApiError as exc:
            logger.error("Action failed (%s): %s", failure, exc.server_message or exc.status_code)
            self.toaster.error(exc.message_or(fallback or failure))
            return None
        finally:
            self.busy = False

        if not envelope.success:
            self.toaster.error(envelope.message or failure)
            return None

        self.toaster.success(success)
        if refresh and self._refresh is not None:
            await self._refresh()
        return envelope
