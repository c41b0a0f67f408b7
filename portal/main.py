"""
Entry points: configure logging, pick up the stored session and hand back
a ready API client.
"""

import logging
from typing import Optional

from portal.api.client import ApiClient
from portal.authentication.utils import PathLike, load_session
from portal.log_config import setup_logging

logger = logging.getLogger(__name__)


def create_api(session_path: Optional[PathLike] = None, base_url: Optional[str] = None) -> ApiClient:
    setup_logging()
    session = load_session(session_path)
    if session is None:
        logger.info("No stored session, starting anonymously")
    return ApiClient(base_url=base_url, token=session.token if session else None)
