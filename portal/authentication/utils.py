"""
Local session persistence: the bearer token and the cached user record,
kept in one JSON file.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from portal.authentication.schemas import SessionData, SessionRole
from portal.config import get_settings
from portal.exceptions import SessionRequired

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _session_path(path: Optional[PathLike] = None) -> Path:
    return Path(path) if path else get_settings().SESSION_FILE


def load_session(path: Optional[PathLike] = None) -> Optional[SessionData]:
    path = _session_path(path)
    if not path.exists():
        return None

    content = path.read_text().strip()
    if not content:
        return None
    try:
        return SessionData.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError):
        logger.warning("Corrupted session file %s. Discarding...", path)
        clear_session(path)
        return None


def save_session(session: SessionData, path: Optional[PathLike] = None) -> None:
    """Write the session to disk (atomic write)."""
    path = _session_path(path)
    os.makedirs(path.parent, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=path.parent)
    os.close(tmp_fd)

    try:
        with open(tmp_path, "w") as f:
            json.dump(session.model_dump(by_alias=True), f, indent=2)
        shutil.move(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def clear_session(path: Optional[PathLike] = None) -> None:
    """Logout: forget token and user data."""
    path = _session_path(path)
    if path.exists():
        path.unlink()


def require_session(role: Optional[SessionRole] = None, path: Optional[PathLike] = None) -> SessionData:
    """Return the stored session, or raise SessionRequired when it is missing or for another role."""
    session = load_session(path)
    if session is None or not session.token:
        raise SessionRequired("Please login to continue")
    if role is not None and session.role != role.value:
        raise SessionRequired("You are not allowed to view this page")
    return session
