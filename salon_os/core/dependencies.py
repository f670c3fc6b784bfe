"""
Request dependencies for FastAPI
"""

from fastapi import Depends, HTTPException, Request, status
from typing import Dict
import hmac
import uuid
import structlog

from salon_os.core.config import get_settings
from salon_os.core.permissions import Permission, has_permission
from salon_os.core.tenancy import VerifiedTenant, require_tenant

logger = structlog.get_logger(__name__)
settings = get_settings()


def get_session_claims(
    request: Request,
    tenant: VerifiedTenant = Depends(require_tenant),
) -> Dict:
    """Claims of the session token the resolver verified for this request"""
    claims = getattr(request.state, "session_claims", None)
    if not claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return claims


def get_current_user_id(request: Request) -> uuid.UUID:
    """User ID forwarded by the tenant middleware"""
    raw = request.headers.get(settings.USER_HEADER)
    try:
        return uuid.UUID(raw)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )


def require_permission(required_permission: Permission):
    """Dependency factory to check permissions"""
    def check_permission(claims: Dict = Depends(get_session_claims)) -> bool:
        if not has_permission(required_permission, claims.get("permissions") or []):
            logger.info(
                "permission_denied",
                user_id=claims.get("sub"),
                permission=required_permission.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {required_permission.value}",
            )
        return True
    return check_permission


def require_platform_key(request: Request) -> None:
    """Operator endpoints on the root domain authenticate with a shared key"""
    expected = settings.PLATFORM_API_KEY
    provided = request.headers.get("x-platform-key") or ""
    if not expected or not hmac.compare_digest(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform access denied",
        )
