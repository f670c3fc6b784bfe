"""
Session API endpoints

Served under the resolver's bypass prefix: the caller has no session yet, so
the tenant is taken from the login form and checked against the host.
"""

from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from salon_os.core.auth import create_access_token, verify_password
from salon_os.core.config import get_settings
from salon_os.core.database import get_session
from salon_os.core.permissions import get_permissions_for_role
from salon_os.core.tenant_resolver import TenantResolver
from salon_os.models.base import utcnow
from salon_os.models.tenant import Tenant
from salon_os.models.user import User
from salon_os.schemas.token import LoginRequest, TokenResponse

logger = structlog.get_logger(__name__)
router = APIRouter()
settings = get_settings()
resolver = TenantResolver.from_settings(settings)

invalid_credentials = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid credentials or inactive account for this salon",
)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session)
):
    """Log in to the salon whose host the form was posted to"""
    subdomain = login_data.subdomain.strip().lower()
    host_subdomain = resolver.subdomain_for_host(request.headers.get("host", ""))
    if not host_subdomain or host_subdomain != subdomain:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The Salon ID entered does not match the website URL",
        )

    tenant = (await session.exec(
        select(Tenant).where(Tenant.subdomain == subdomain, Tenant.is_active == True)  # noqa: E712
    )).first()
    if not tenant:
        raise invalid_credentials

    user = (await session.exec(
        select(User).where(
            User.tenant_id == tenant.id,
            User.email == login_data.email.lower(),
            User.is_active == True,  # noqa: E712
        )
    )).first()
    if not user or not verify_password(login_data.password, user.password_hash):
        logger.info("login_failed", subdomain=subdomain)
        raise invalid_credentials

    user.last_login_at = utcnow()
    session.add(user)
    await session.commit()

    permissions = [p.value for p in get_permissions_for_role(user.role.value)]
    access_token = create_access_token(
        user_id=user.id,
        tenant_id=tenant.id,
        subdomain=tenant.subdomain,
        role=user.role.value,
        permissions=permissions,
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=int(timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES).total_seconds()),
        httponly=True,
        secure=settings.URL_SCHEME == "https",
        samesite="lax",
    )
    logger.info("user_logged_in", user_id=str(user.id), tenant_id=str(tenant.id))

    return TokenResponse(
        access_token=access_token,
        user_id=str(user.id),
        tenant_id=str(tenant.id),
        subdomain=tenant.subdomain,
        role=user.role.value,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout():
    """Drop the session cookie"""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
