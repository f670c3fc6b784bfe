"""
Tests for the tenant context middleware: trusted headers and path rewriting
"""

import uuid

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from salon_os.core.auth import create_access_token
from salon_os.core.config import get_settings
from salon_os.core.tenant_middleware import TenantContextMiddleware

settings = get_settings()

TENANT_ID = uuid.uuid4()
USER_ID = uuid.uuid4()


def _echo_app() -> FastAPI:
    echo = FastAPI()

    @echo.api_route("/{path:path}", methods=["GET", "POST"])
    async def echo_request(path: str, request: Request):
        return {
            "path": request.url.path,
            "tenant": request.headers.get(settings.TENANT_HEADER),
            "user": request.headers.get(settings.USER_HEADER),
            "tenant_headers": len(request.headers.getlist(settings.TENANT_HEADER)),
            "has_claims": bool(getattr(request.state, "session_claims", None)),
        }

    echo.add_middleware(TenantContextMiddleware)
    return echo


def _token(subdomain: str = "glamour", tenant_id: uuid.UUID = TENANT_ID) -> str:
    return create_access_token(
        user_id=USER_ID,
        tenant_id=tenant_id,
        subdomain=subdomain,
        role="admin",
    )


@pytest.fixture
async def echo_client():
    async with AsyncClient(
        transport=ASGITransport(app=_echo_app()),
        base_url="http://glamour.app.example",
    ) as client:
        yield client


async def test_verified_tenant_header_injected(echo_client):
    response = await echo_client.get(
        "/api/customers",
        headers={"Authorization": f"Bearer {_token()}"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tenant"] == str(TENANT_ID)
    assert body["user"] == str(USER_ID)
    assert body["path"] == "/api/customers"
    assert body["has_claims"] is True


async def test_spoofed_tenant_header_replaced(echo_client):
    """A client-supplied tenant header never reaches the handler"""
    response = await echo_client.get(
        "/api/customers",
        headers={
            "Authorization": f"Bearer {_token()}",
            settings.TENANT_HEADER: str(uuid.uuid4()),
            settings.USER_HEADER: str(uuid.uuid4()),
        },
    )
    body = response.json()
    assert body["tenant"] == str(TENANT_ID)
    assert body["user"] == str(USER_ID)
    assert body["tenant_headers"] == 1


async def test_spoofed_header_stripped_on_root_domain():
    async with AsyncClient(
        transport=ASGITransport(app=_echo_app()),
        base_url="http://app.example",
    ) as client:
        response = await client.get(
            "/api/platform/tenants",
            headers={settings.TENANT_HEADER: str(uuid.uuid4())},
        )
    assert response.status_code == 200
    assert response.json()["tenant"] is None


async def test_spoofed_header_stripped_on_bypassed_path(echo_client):
    response = await echo_client.post(
        "/api/auth/login",
        headers={settings.TENANT_HEADER: str(uuid.uuid4())},
    )
    assert response.json()["tenant"] is None


async def test_page_path_rewritten_with_subdomain(echo_client):
    response = await echo_client.get("/dashboard", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={_token()}"})
    assert response.status_code == 200
    assert response.json()["path"] == "/glamour/dashboard"


async def test_cookie_token_accepted(echo_client):
    echo_client.cookies.set(settings.SESSION_COOKIE_NAME, _token())
    response = await echo_client.get("/appointments")
    assert response.status_code == 200
    assert response.json()["path"] == "/appointments"
    assert response.json()["tenant"] == str(TENANT_ID)


async def test_missing_session_redirects_to_login(echo_client):
    response = await echo_client.get("/dashboard")
    assert response.status_code == 307
    assert response.headers["location"] == "http://glamour.app.example/login?redirect=%2Fdashboard"


async def test_mismatched_session_redirects_to_own_salon(echo_client):
    response = await echo_client.get(
        "/dashboard",
        headers={"Authorization": f"Bearer {_token('other-salon', uuid.uuid4())}"},
    )
    assert response.status_code == 307
    assert response.headers["location"] == "http://other-salon.app.example/login?error=MismatchedSalon"


async def test_foreign_host_rejected():
    async with AsyncClient(
        transport=ASGITransport(app=_echo_app()),
        base_url="http://glamour.evil.example",
    ) as client:
        response = await client.get("/dashboard")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"
