"""
Tenant page shell

Page requests arrive here after the resolver rewrote them to
``/{subdomain}{path}``. Only the tenant context is returned; rendering lives
in the front end.
"""

from fastapi import APIRouter, Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Dict

from salon_os.core.config import get_settings
from salon_os.core.database import get_session
from salon_os.core.dependencies import get_session_claims
from salon_os.core.exceptions import NotFoundError
from salon_os.core.tenancy import VerifiedTenant, require_tenant
from salon_os.models.tenant import Tenant

router = APIRouter()
settings = get_settings()


async def tenant_page(
    subdomain: str,
    request: Request,
    tenant: VerifiedTenant = Depends(require_tenant),
    claims: Dict = Depends(get_session_claims),
    session: AsyncSession = Depends(get_session),
):
    db_tenant = await session.get(Tenant, tenant.id)
    if not db_tenant or db_tenant.subdomain != subdomain:
        raise NotFoundError("Page")
    return {
        "tenant": {"id": str(db_tenant.id), "name": db_tenant.name, "subdomain": db_tenant.subdomain},
        "page": request.url.path[len(subdomain) + 1:],
        "user_id": claims.get("sub"),
        "role": claims.get("role"),
        "permissions": claims.get("permissions") or [],
    }


# Only the rewritten page prefixes are routed here, never /api
for prefix in settings.PAGE_PREFIXES:
    router.add_api_route(f"/{{subdomain}}{prefix}", tenant_page, methods=["GET"])
    router.add_api_route(f"/{{subdomain}}{prefix}/{{rest:path}}", tenant_page, methods=["GET"])
