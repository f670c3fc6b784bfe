"""
Day-end closing API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import date
from typing import List, Optional
import uuid

from salon_os.core.database import get_session
from salon_os.core.day_closing import DayClosingGuard
from salon_os.core.dependencies import get_current_user_id, require_permission
from salon_os.core.exceptions import LedgerUnavailableError
from salon_os.core.permissions import Permission
from salon_os.core.tenancy import VerifiedTenant, require_tenant
from salon_os.schemas.day_closing import ClosingStatus, DayEndReportCreate, DayEndReportRead
from salon_os.services import day_closing
from salon_os.services.day_closing import get_day_closing_guard

router = APIRouter()


@router.post(
    "/",
    response_model=DayEndReportRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.DAYEND_CREATE))],
)
async def submit_day_end_report(
    report_data: DayEndReportCreate,
    tenant: VerifiedTenant = Depends(require_tenant),
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Submit the day-end report; a completed report closes the day"""
    return await day_closing.create_report(session, guard, tenant, user_id, report_data)


@router.post(
    "/{report_id}/complete",
    response_model=DayEndReportRead,
    dependencies=[Depends(require_permission(Permission.DAYEND_CREATE))],
)
async def complete_day_end_report(
    report_id: uuid.UUID,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Finalize a draft report"""
    return await day_closing.complete_report(session, guard, tenant, report_id)


@router.get(
    "/history",
    response_model=List[DayEndReportRead],
    dependencies=[Depends(require_permission(Permission.DAYEND_READ))],
)
async def day_end_history(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=31, ge=1, le=366),
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
):
    """List day-end reports, newest first"""
    return await day_closing.list_reports(session, tenant, date_from, date_to, skip=skip, limit=limit)


@router.get(
    "/status",
    response_model=ClosingStatus,
    dependencies=[Depends(require_permission(Permission.DAYEND_READ))],
)
async def closing_status(
    day: date = Query(..., alias="date"),
    tenant: VerifiedTenant = Depends(require_tenant),
    guard: DayClosingGuard = Depends(get_day_closing_guard),
):
    """Whether financial records dated ``date`` can still be changed"""
    try:
        closed_through = await guard.latest_closed_date(tenant.id)
    except Exception as e:
        raise LedgerUnavailableError() from e
    return ClosingStatus(
        day=day,
        locked=closed_through is not None and day <= closed_through,
        closed_through=closed_through,
    )


@router.get(
    "/{report_id}",
    response_model=DayEndReportRead,
    dependencies=[Depends(require_permission(Permission.DAYEND_READ))],
)
async def get_day_end_report(
    report_id: uuid.UUID,
    tenant: VerifiedTenant = Depends(require_tenant),
    session: AsyncSession = Depends(get_session),
):
    """Get day-end report by ID"""
    return await day_closing.get_report(session, tenant, report_id)
