"""
Customer API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Optional
import uuid

from salon_os.core.database import get_session
from salon_os.core.dependencies import require_permission
from salon_os.core.permissions import Permission
from salon_os.core.tenancy import VerifiedTenant, require_tenant
from salon_os.schemas.customer import CustomerCreate, CustomerPage, CustomerRead, CustomerUpdate
from salon_os.services.customers import CustomerDirectory, get_customer_directory

router = APIRouter()


@router.get(
    "/",
    response_model=CustomerPage,
    dependencies=[Depends(require_permission(Permission.CUSTOMERS_READ))],
)
async def search_customers(
    search: Optional[str] = Query(default=None, max_length=64),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    directory: CustomerDirectory = Depends(get_customer_directory),
):
    """List customers; digits search the phone number by prefix, text searches the name"""
    customers, total = await directory.search(session, tenant, search, page=page, limit=limit)
    return CustomerPage(
        items=[directory.to_read(c) for c in customers],
        total=total,
        page=page,
        limit=limit,
    )


@router.get(
    "/by-phone",
    response_model=Optional[CustomerRead],
    dependencies=[Depends(require_permission(Permission.CUSTOMERS_READ))],
)
async def get_customer_by_phone(
    phone: str = Query(..., min_length=1, max_length=32),
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    directory: CustomerDirectory = Depends(get_customer_directory),
):
    """Exact lookup by full phone number"""
    customer = await directory.find_by_phone(session, tenant, phone)
    return directory.to_read(customer) if customer else None


@router.post(
    "/",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.CUSTOMERS_CREATE))],
)
async def create_customer(
    customer_data: CustomerCreate,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    directory: CustomerDirectory = Depends(get_customer_directory),
):
    """Create a customer"""
    customer = await directory.create(session, tenant, customer_data)
    return directory.to_read(customer)


@router.get(
    "/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_permission(Permission.CUSTOMERS_READ))],
)
async def get_customer(
    customer_id: uuid.UUID,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    directory: CustomerDirectory = Depends(get_customer_directory),
):
    """Get customer by ID"""
    return directory.to_read(await directory.get(session, tenant, customer_id))


@router.patch(
    "/{customer_id}",
    response_model=CustomerRead,
    dependencies=[Depends(require_permission(Permission.CUSTOMERS_UPDATE))],
)
async def update_customer(
    customer_id: uuid.UUID,
    customer_update: CustomerUpdate,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    directory: CustomerDirectory = Depends(get_customer_directory),
):
    """Update customer; a new phone number is re-indexed"""
    customer = await directory.update(session, tenant, customer_id, customer_update)
    return directory.to_read(customer)
