"""
Draft handling for create/edit forms.

A draft is a pydantic model built with `model_construct`, so it can hold
half-typed input. Validation only happens on submit, by running the model's
own validators over the draft; failures become a field -> message map and
no request is sent.
"""

import re
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from portal.core.files import FileUpload, PreviewLoader, validate_image
from portal.exceptions import ApiError, FileValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8

D = TypeVar("D", bound=BaseModel)


def require_text(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise ValueError(message)
    return value


def require_email(value: Optional[str]) -> str:
    require_text(value, "Email is required")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value


def collect_errors(exc: ValidationError) -> Dict[str, str]:
    """First message per field, using the text our validators raised."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "form"
        raised = (error.get("ctx") or {}).get("error")
        errors.setdefault(field, str(raised) if raised is not None else error["msg"])
    return errors


class FormController(Generic[D]):
    def __init__(self, model: Type[D], defaults: Callable[[], Dict[str, Any]] = dict):
        self.model = model
        self.defaults = defaults
        self.preview = PreviewLoader()
        self.reset()

    @property
    def creating(self) -> bool:
        return self.target_id is None

    def reset(self, **values: Any) -> None:
        self.draft: D = self.model.model_construct(**{**self.defaults(), **values})
        self.errors: Dict[str, str] = {}
        self.target_id: Optional[str] = None
        self.image: Optional[FileUpload] = None
        self.preview.clear()

    def load(self, target_id: str, values: Dict[str, Any], image_url: Optional[str] = None) -> None:
        """Start editing an existing record."""
        self.reset(**values)
        self.target_id = target_id
        self.preview.show(image_url)

    def update(self, **changes: Any) -> None:
        for name, value in changes.items():
            if name not in self.model.model_fields:
                raise AttributeError(f"{self.model.__name__} has no field {name!r}")
            setattr(self.draft, name, value)
            self.errors.pop(name, None)

    def attach_image(self, file: Optional[FileUpload], field: str, max_bytes: Optional[int] = None) -> bool:
        """Pick (or clear, with None) the image upload; a rejected file leaves the previous one."""
        if file is None:
            self.image = None
            self.preview.clear()
            return True
        try:
            validate_image(file, field=field, max_bytes=max_bytes)
        except FileValidationError as exc:
            self.errors[field] = exc.message
            return False
        self.image = file
        self.errors.pop(field, None)
        self.preview.load(file)
        return True

    def validate(self) -> bool:
        try:
            self.model.model_validate(self.draft.model_dump(), context={"creating": self.creating})
        except ValidationError as exc:
            self.errors = collect_errors(exc)
            return False
        self.errors = {}
        return True

    def apply_server_error(self, exc: ApiError) -> bool:
        """Put a server-reported field error on its field; False when there is none."""
        if exc.field and exc.server_message:
            self.errors[exc.field] = exc.server_message
            return True
        return False
