"""
Platform tenant API endpoints

Operator-only routes served on the bare root domain. They are not tenant
scoped and authenticate with the platform key instead of a session.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List
import structlog
import uuid

from salon_os.core.auth import hash_password
from salon_os.core.database import get_session
from salon_os.core.dependencies import require_platform_key
from salon_os.core.exceptions import ConflictError, NotFoundError
from salon_os.models.base import utcnow
from salon_os.models.tenant import Tenant
from salon_os.models.user import User
from salon_os.schemas.tenant import TenantCreate, TenantCreated, TenantRead, TenantUpdate
from salon_os.schemas.user import UserResponse

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_platform_key)])


async def _get_tenant(session: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant")
    return tenant


@router.post("/", response_model=TenantCreated, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    tenant_data: TenantCreate,
    session: AsyncSession = Depends(get_session)
):
    """Provision a salon and its first administrator"""
    taken = await session.exec(select(Tenant).where(Tenant.subdomain == tenant_data.subdomain))
    if taken.first():
        raise ConflictError(f"Subdomain '{tenant_data.subdomain}' is already taken")

    tenant = Tenant(name=tenant_data.name, subdomain=tenant_data.subdomain)
    session.add(tenant)
    await session.flush()

    admin = User(
        tenant_id=tenant.id,
        email=tenant_data.admin.email.lower(),
        name=tenant_data.admin.name,
        password_hash=hash_password(tenant_data.admin.password),
        role=tenant_data.admin.role,
    )
    session.add(admin)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Subdomain '{tenant_data.subdomain}' is already taken")
    await session.refresh(tenant)
    await session.refresh(admin)

    logger.info("tenant_created", tenant_id=str(tenant.id), subdomain=tenant.subdomain)
    return TenantCreated(
        tenant=TenantRead.model_validate(tenant, from_attributes=True),
        admin=UserResponse.model_validate(admin, from_attributes=True),
    )


@router.get("/{tenant_id}", response_model=TenantRead)
async def get_tenant(
    tenant_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Get tenant by ID"""
    return await _get_tenant(session, tenant_id)


@router.get("/", response_model=List[TenantRead])
async def list_tenants(
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session)
):
    """List all tenants"""
    result = await session.exec(select(Tenant).order_by(Tenant.created_at).offset(skip).limit(limit))
    return result.all()


@router.patch("/{tenant_id}", response_model=TenantRead)
async def update_tenant(
    tenant_id: uuid.UUID,
    tenant_update: TenantUpdate,
    session: AsyncSession = Depends(get_session)
):
    """Rename or (de)activate a tenant"""
    db_tenant = await _get_tenant(session, tenant_id)

    tenant_data = tenant_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in tenant_data.items():
        setattr(db_tenant, key, value)
    db_tenant.updated_at = utcnow()

    session.add(db_tenant)
    await session.commit()
    await session.refresh(db_tenant)
    logger.info("tenant_updated", tenant_id=str(tenant_id), fields=sorted(tenant_data))
    return db_tenant
