"""
Tests for session tokens and login
"""

from datetime import timedelta
import uuid

from jose import jwt

from salon_os.core.auth import create_access_token, decode_access_token, hash_password, verify_password
from salon_os.core.config import get_settings

settings = get_settings()


def test_create_access_token():
    """Test JWT token creation"""
    user_id = uuid.uuid4()
    tenant_id = uuid.uuid4()

    token = create_access_token(
        user_id=user_id,
        tenant_id=tenant_id,
        subdomain="glamour",
        role="manager",
        permissions=["dayend:read", "customers:read"],
        expires_delta=timedelta(hours=1),
    )

    payload = decode_access_token(token)
    assert payload["sub"] == str(user_id)
    assert payload["tenant_id"] == str(tenant_id)
    assert payload["subdomain"] == "glamour"
    assert payload["role"] == "manager"
    assert payload["permissions"] == ["customers:read", "dayend:read"]
    assert "exp" in payload and "iat" in payload


def test_decode_invalid_token():
    assert decode_access_token("invalid.token.string.here") is None
    assert decode_access_token("") is None
    assert decode_access_token(None) is None


def test_decode_expired_token():
    token = create_access_token(
        user_id=uuid.uuid4(),
        tenant_id=uuid.uuid4(),
        subdomain="glamour",
        role="admin",
        expires_delta=timedelta(seconds=-1),
    )
    assert decode_access_token(token) is None


def test_decode_token_signed_with_other_key():
    forged = jwt.encode(
        {"sub": str(uuid.uuid4()), "tenant_id": str(uuid.uuid4()), "subdomain": "glamour"},
        "not-the-secret",
        algorithm=settings.JWT_ALGORITHM,
    )
    assert decode_access_token(forged) is None


def test_password_hashing():
    password_hash = hash_password("s3cret-pass")
    assert password_hash != "s3cret-pass"
    assert verify_password("s3cret-pass", password_hash)
    assert not verify_password("wrong-pass", password_hash)


async def test_login_issues_session_for_host_salon(client, glamour, password):
    tenant, user = glamour

    response = await client.post(
        "/api/auth/login",
        json={"subdomain": "glamour", "email": user.email, "password": password},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tenant_id"] == str(tenant.id)
    assert body["subdomain"] == "glamour"
    assert body["role"] == "admin"
    assert settings.SESSION_COOKIE_NAME in response.cookies

    claims = decode_access_token(body["access_token"])
    assert claims["tenant_id"] == str(tenant.id)
    assert "dayend:create" in claims["permissions"]


async def test_login_subdomain_must_match_host(client, glamour, other_salon, password):
    other_tenant, other_user = other_salon

    response = await client.post(
        "/api/auth/login",
        json={"subdomain": "other-salon", "email": other_user.email, "password": password},
    )
    assert response.status_code == 400


async def test_login_user_of_other_salon_rejected(client, glamour, other_salon, password):
    other_tenant, other_user = other_salon

    response = await client.post(
        "/api/auth/login",
        json={"subdomain": "glamour", "email": other_user.email, "password": password},
    )
    assert response.status_code == 401


async def test_login_wrong_password(client, glamour):
    tenant, user = glamour

    response = await client.post(
        "/api/auth/login",
        json={"subdomain": "glamour", "email": user.email, "password": "wrong-password"},
    )
    assert response.status_code == 401


async def test_login_inactive_salon(client, db, glamour, password):
    tenant, user = glamour
    tenant.is_active = False
    db.add(tenant)
    await db.commit()

    response = await client.post(
        "/api/auth/login",
        json={"subdomain": "glamour", "email": user.email, "password": password},
    )
    assert response.status_code == 401


async def test_session_from_login_opens_tenant_page(client, glamour, password):
    tenant, user = glamour
    login = await client.post(
        "/api/auth/login",
        json={"subdomain": "glamour", "email": user.email, "password": password},
    )
    token = login.json()["access_token"]

    response = await client.get("/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    body = response.json()
    assert body["tenant"]["subdomain"] == "glamour"
    assert body["page"] == "/dashboard"
    assert body["user_id"] == str(user.id)


async def test_page_without_session_redirects_to_login(client):
    response = await client.get("/crm/clients")
    assert response.status_code == 307
    assert response.headers["location"] == "http://glamour.app.example/login?redirect=%2Fcrm%2Fclients"


async def test_logout_clears_cookie(client):
    response = await client.post("/api/auth/logout")
    assert response.status_code == 204
    assert settings.SESSION_COOKIE_NAME in response.headers.get("set-cookie", "")


async def test_health_is_public(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_cors_preflight_answered_without_session(client):
    """Browsers send preflights without credentials; they must not be redirected to login"""
    origin = settings.ALLOWED_ORIGINS[0]
    response = await client.options(
        "/api/customers/",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization,content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin
    assert response.headers["access-control-allow-credentials"] == "true"


async def test_cors_headers_on_authenticated_request(client, auth_headers, glamour):
    tenant, user = glamour
    origin = settings.ALLOWED_ORIGINS[0]
    response = await client.get("/api/customers/", headers={**auth_headers(tenant, user), "Origin": origin})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin
