"""
Exceptions raised by the portal client.

Client-side validation problems are raised as FormValidationError /
FileValidationError and never reach the network. Anything that went wrong
on the wire is an ApiError carrying whatever the server said.
"""

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base exception for the portal client."""

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message or self.__class__.__name__)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "details": self.details,
                "type": self.__class__.__name__,
            }
        }


class ApiError(PortalError):
    """
    A request failed: either the transport broke (no status code, no server
    message) or the server answered with an error envelope.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        field: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details={"status_code": status_code, "field": field})
        self.status_code = status_code
        self.field = field
        self.payload = payload or {}

    @property
    def server_message(self) -> Optional[str]:
        return self.payload.get("message") or None

    def message_or(self, fallback: str) -> str:
        """Server-supplied message if there is one, otherwise `fallback`."""
        return self.server_message or fallback


class FormValidationError(PortalError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("Please fix the errors in the form", details=dict(errors))
        self.errors = dict(errors)


class FileValidationError(PortalError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field})
        self.field = field


class SessionRequired(PortalError):
    """No usable session: the caller must send the user to `redirect_to`."""

    def __init__(self, message: str = "Login required", redirect_to: str = "/login"):
        super().__init__(message, details={"redirect_to": redirect_to})
        self.redirect_to = redirect_to
