"""
Tenant-scoped data access guard

Handlers obtain the tenant they may touch only through ``require_tenant``,
which reads the header injected by ``TenantContextMiddleware``. Nothing else
can construct a ``VerifiedTenant``, so a query cannot be scoped by a tenant id
invented from the host, the token or the request body.
"""

from typing import Optional
import uuid

from fastapi import HTTPException, Request, status
import structlog

from salon_os.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

_ISSUER = object()


class VerifiedTenant:
    """The tenant a request was bound to by the resolver"""

    __slots__ = ("_id",)

    def __init__(self, tenant_id: uuid.UUID, *, _issuer: object = None):
        if _issuer is not _ISSUER:
            raise TypeError("VerifiedTenant is only issued by require_tenant()")
        object.__setattr__(self, "_id", tenant_id)

    def __setattr__(self, name, value):
        raise AttributeError("VerifiedTenant is immutable")

    @property
    def id(self) -> uuid.UUID:
        return self._id

    def __eq__(self, other) -> bool:
        return isinstance(other, VerifiedTenant) and other._id == self._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return str(self._id)

    def __repr__(self) -> str:
        return f"VerifiedTenant({self._id})"


def _reject(request: Request, reason: str) -> HTTPException:
    logger.warning("tenant_scope_missing", path=request.url.path, reason=reason)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Tenant context is not available for this request",
    )


def require_tenant(request: Request) -> VerifiedTenant:
    """FastAPI dependency: the verified tenant for this request, or 400.

    The first successful call caches the result on the request so every later
    call in the same request sees the identical value.
    """
    cached: Optional[VerifiedTenant] = getattr(request.state, "verified_tenant", None)
    if cached is not None:
        return cached

    raw = request.headers.get(settings.TENANT_HEADER)
    if not raw:
        raise _reject(request, "header_absent")
    try:
        tenant_id = uuid.UUID(raw)
    except ValueError:
        raise _reject(request, "header_malformed")

    tenant = VerifiedTenant(tenant_id, _issuer=_ISSUER)
    request.state.verified_tenant = tenant
    return tenant
