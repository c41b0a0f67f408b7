"""
Shared fixtures: a fresh in-memory stub API per test, an ApiClient wired to
it through httpx's ASGI transport, and a log of every request that actually
left the client.
"""

import httpx
import pytest

from portal.api.client import ApiClient
from portal.authentication.schemas import AdminProfile
from portal.core.panel import AdminContext
from portal.core.toasts import Toaster
from portal.tests.stub_api import ADMIN, create_stub_app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def stub_app():
    return create_stub_app()


@pytest.fixture
def db(stub_app):
    return stub_app.state.db


@pytest.fixture
def request_log():
    """(method, path) of every request sent, in order."""
    return []


@pytest.fixture
async def api(stub_app, request_log, anyio_backend):
    async def _record(request: httpx.Request):
        request_log.append((request.method, request.url.path))

    http = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=stub_app),
        base_url="http://testserver",
        event_hooks={"request": [_record]},
    )
    client = ApiClient(http=http, token="test-token")
    yield client
    await client.aclose()


@pytest.fixture
def admin_context():
    return AdminContext(AdminProfile.model_validate(ADMIN))


@pytest.fixture
def toaster():
    return Toaster(default_duration=5)


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "session.json"
