"""
Expense API endpoints

Every write consults the day-closing guard for each date it touches, so an
expense cannot be added to, moved into, moved out of or removed from a closed
day.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
from datetime import date
import structlog
import uuid

from salon_os.core.database import get_session
from salon_os.core.day_closing import DayClosingGuard, ensure_ledger_open
from salon_os.core.dependencies import get_current_user_id, require_permission
from salon_os.core.exceptions import NotFoundError
from salon_os.core.permissions import Permission
from salon_os.core.tenancy import VerifiedTenant, require_tenant
from salon_os.models.base import utcnow
from salon_os.models.expense import Expense
from salon_os.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from salon_os.services.day_closing import get_day_closing_guard

logger = structlog.get_logger(__name__)
router = APIRouter()


async def _get_expense(session: AsyncSession, tenant: VerifiedTenant, expense_id: uuid.UUID) -> Expense:
    result = await session.exec(
        select(Expense).where(Expense.id == expense_id, Expense.tenant_id == tenant.id)
    )
    expense = result.first()
    if not expense:
        raise NotFoundError("Expense")
    return expense


@router.post(
    "/",
    response_model=ExpenseRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.EXPENSES_CREATE))],
)
async def create_expense(
    expense_data: ExpenseCreate,
    tenant: VerifiedTenant = Depends(require_tenant),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Record an expense on an open day"""
    await ensure_ledger_open(guard, tenant.id, expense_data.expense_date)

    expense = Expense(tenant_id=tenant.id, created_by=user_id, **expense_data.model_dump())
    session.add(expense)
    await session.commit()
    await session.refresh(expense)
    logger.info("expense_created", tenant_id=str(tenant.id), expense_id=str(expense.id))
    return expense


@router.get(
    "/",
    response_model=List[ExpenseRead],
    dependencies=[Depends(require_permission(Permission.EXPENSES_READ))],
)
async def list_expenses(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
):
    """List expenses, newest first"""
    query = select(Expense).where(Expense.tenant_id == tenant.id)
    if date_from:
        query = query.where(Expense.expense_date >= date_from)
    if date_to:
        query = query.where(Expense.expense_date <= date_to)
    query = query.order_by(Expense.expense_date.desc(), Expense.created_at.desc()).offset(skip).limit(limit)
    result = await session.exec(query)
    return result.all()


@router.get(
    "/{expense_id}",
    response_model=ExpenseRead,
    dependencies=[Depends(require_permission(Permission.EXPENSES_READ))],
)
async def get_expense(
    expense_id: uuid.UUID,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
):
    """Get expense by ID"""
    return await _get_expense(session, tenant, expense_id)


@router.patch(
    "/{expense_id}",
    response_model=ExpenseRead,
    dependencies=[Depends(require_permission(Permission.EXPENSES_UPDATE))],
)
async def update_expense(
    expense_id: uuid.UUID,
    expense_update: ExpenseUpdate,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Update expense; both the current and the new date must be open"""
    expense = await _get_expense(session, tenant, expense_id)
    update_data = expense_update.model_dump(exclude_unset=True, exclude_none=True)

    days = [expense.expense_date]
    if "expense_date" in update_data:
        days.append(update_data["expense_date"])
    await ensure_ledger_open(guard, tenant.id, *days)

    for key, value in update_data.items():
        setattr(expense, key, value)
    expense.updated_at = utcnow()

    session.add(expense)
    await session.commit()
    await session.refresh(expense)
    return expense


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(Permission.EXPENSES_DELETE))],
)
async def delete_expense(
    expense_id: uuid.UUID,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Delete expense from an open day"""
    expense = await _get_expense(session, tenant, expense_id)
    await ensure_ledger_open(guard, tenant.id, expense.expense_date)

    await session.delete(expense)
    await session.commit()
    logger.info("expense_deleted", tenant_id=str(tenant.id), expense_id=str(expense_id))
