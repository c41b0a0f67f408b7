"""
Async HTTP client for the complaint platform REST API.

Every call returns the parsed Envelope. Transport failures and non-2xx
answers are raised as ApiError; a 2xx answer with `success: false` is
returned as-is so callers can decide which message to show.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import httpx

from portal.api.schemas import Envelope
from portal.config import get_settings
from portal.exceptions import ApiError

logger = logging.getLogger(__name__)

# (field name, (filename, content, content type)) as httpx expects for multipart
MultipartFile = Tuple[str, Tuple[str, bytes, str]]


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        cleaned[key] = str(value).lower() if isinstance(value, bool) else value
    return cleaned


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.token = token
        self._http = http or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.REQUEST_TIMEOUT,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Iterable[MultipartFile]] = None,
    ) -> Envelope:
        files = list(files) if files else None
        try:
            response = await self._http.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
                data=data,
                files=files,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ApiError(None) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {"data": payload}

        if response.is_error:
            logger.error("%s %s -> %s %s", method, path, response.status_code, payload.get("message"))
            raise ApiError(
                payload.get("message"),
                status_code=response.status_code,
                field=payload.get("field"),
                payload=payload,
            )
        return Envelope.model_validate(payload)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Envelope:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, *, data=None, files=None) -> Envelope:
        return await self.request("POST", path, json=json, data=data, files=files)

    async def put(self, path: str, json: Any = None, *, data=None, files=None) -> Envelope:
        return await self.request("PUT", path, json=json, data=data, files=files)

    async def delete(self, path: str, json: Any = None) -> Envelope:
        return await self.request("DELETE", path, json=json)

    async def send_form(self, method: str, path: str, fields: Dict[str, Any], files: Iterable[MultipartFile] = ()) -> Envelope:
        """
        Send `fields` as form data, stringified the way a browser FormData
        would. httpx encodes it as multipart only when files are attached,
        urlencoded otherwise.
        """
        data = {}
        for key, value in fields.items():
            if value is None:
                continue
            data[key] = str(value).lower() if isinstance(value, bool) else str(value)
        return await self.request(method, path, data=data, files=list(files) or None)
