"""
File uploads: client-side type/size checks and image previews.

Previews are read off the event loop. A read that is still pending when the
user picks another file or closes the modal is cancelled so a late result
cannot land on the next form.
"""

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from portal.config import MB, get_settings
from portal.exceptions import FileValidationError

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg")


@dataclass(frozen=True)
class FileUpload:
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "FileUpload":
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or guessed or "application/octet-stream",
        )

    def as_multipart(self, field: str) -> Tuple[str, Tuple[str, bytes, str]]:
        return field, (self.filename, self.content, self.content_type)


def _megabytes(limit: int) -> str:
    return f"{limit // MB}MB"


def validate_image(file: FileUpload, field: str = "profileImage", max_bytes: Optional[int] = None) -> None:
    """Raise FileValidationError unless `file` is a JPEG/PNG within the size cap."""
    max_bytes = max_bytes or get_settings().MAX_IMAGE_BYTES
    if file.content_type not in IMAGE_TYPES:
        raise FileValidationError(
            "Invalid file type. Only JPG, JPEG, and PNG files are allowed.", field=field
        )
    if file.size > max_bytes:
        raise FileValidationError(
            f"File is too large. Maximum size is {_megabytes(max_bytes)}.", field=field
        )


def select_attachments(
    files: Sequence[FileUpload],
    max_files: int,
    max_bytes: Optional[int] = None,
) -> Tuple[List[FileUpload], Optional[str]]:
    """
    Apply the attachment picker rules.

    Any oversized file rejects the whole selection. Extra files beyond
    `max_files` are dropped; the second item of the result is the warning
    to show when that happens.
    """
    max_bytes = max_bytes or get_settings().MAX_ATTACHMENT_BYTES
    oversized = [f.filename for f in files if f.size > max_bytes]
    if oversized:
        raise FileValidationError(
            f"Some files exceed the {_megabytes(max_bytes)} size limit: {', '.join(oversized)}",
            field="attachments",
        )
    warning = None
    if len(files) > max_files:
        warning = f"Maximum {max_files} files allowed. Only the first {max_files} will be used."
    return list(files[:max_files]), warning


def to_data_url(file: FileUpload) -> str:
    encoded = base64.b64encode(file.content).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


class PreviewLoader:
    """Holds the preview shown next to an image field."""

    def __init__(self):
        self.preview: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def load(self, file: FileUpload) -> asyncio.Task:
        self.cancel()
        logger.debug("Reading preview for %s (%d bytes)", file.filename, file.size)
        self._task = asyncio.get_running_loop().create_task(self._read(file))
        return self._task

    async def _read(self, file: FileUpload) -> None:
        self.preview = await asyncio.to_thread(to_data_url, file)

    def show(self, url: Optional[str]) -> None:
        """Show an already hosted image (edit forms)."""
        self.cancel()
        self.preview = url

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    def clear(self) -> None:
        self.cancel()
        self.preview = None

    async def wait(self) -> Optional[str]:
        if self._task is not None:
            await asyncio.wait({self._task})
        return self.preview
