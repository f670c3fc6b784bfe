"""
Day-end closing service

Creates and finalizes day-end reports and keeps the process-wide
``DayClosingGuard`` in step with them. Every path that completes a report
invalidates the guard cache for the tenant before returning.
"""

from datetime import date
from functools import lru_cache
from typing import Callable, List, Optional
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from salon_os.core.database import async_session_maker
from salon_os.core.day_closing import ClosingDateCache, DayClosingGuard
from salon_os.core.exceptions import ConflictError, NotFoundError
from salon_os.core.tenancy import VerifiedTenant
from salon_os.models.base import utcnow
from salon_os.models.day_end_report import DayEndReport
from salon_os.schemas.day_closing import DayEndReportCreate

logger = structlog.get_logger(__name__)


class SqlClosingLedger:
    """Reads the latest completed closing from the day_end_reports table"""

    def __init__(self, session_factory: Callable[[], AsyncSession] = async_session_maker):
        self.session_factory = session_factory

    async def latest_closed_date(self, tenant_id: uuid.UUID) -> Optional[date]:
        async with self.session_factory() as session:
            result = await session.exec(
                select(func.max(DayEndReport.closing_date)).where(
                    DayEndReport.tenant_id == tenant_id,
                    DayEndReport.is_completed == True,  # noqa: E712
                )
            )
            return result.first()


@lru_cache()
def get_day_closing_guard() -> DayClosingGuard:
    """Process-wide guard (FastAPI dependency)"""
    return DayClosingGuard(SqlClosingLedger(), ClosingDateCache())


def _discrepancies(expected: dict, actual: dict) -> dict:
    keys = set(expected) | set(actual)
    return {key: round(actual.get(key, 0) - expected.get(key, 0), 2) for key in sorted(keys)}


async def create_report(
    session: AsyncSession,
    guard: DayClosingGuard,
    tenant: VerifiedTenant,
    user_id: uuid.UUID,
    data: DayEndReportCreate,
) -> DayEndReport:
    """Save a day-end report; a completed one closes the ledger through its date"""
    existing = await session.exec(
        select(DayEndReport).where(
            DayEndReport.tenant_id == tenant.id,
            DayEndReport.closing_date == data.closing_date,
        )
    )
    if existing.first():
        raise ConflictError(f"A report for {data.closing_date.isoformat()} already exists")

    expected = data.expected_totals.as_record()
    actual = data.actual_totals.as_record()
    report = DayEndReport(
        tenant_id=tenant.id,
        closing_date=data.closing_date,
        opening_balance=data.opening_balance,
        is_opening_balance_manual=data.is_opening_balance_manual,
        petty_cash_total=data.petty_cash_total,
        expected_totals=expected,
        actual_totals=actual,
        discrepancies=_discrepancies(expected, actual),
        cash_denominations=data.cash_denominations,
        notes=data.notes,
        closed_by=user_id,
        is_completed=data.is_completed,
        completed_at=utcnow() if data.is_completed else None,
    )
    session.add(report)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"A report for {data.closing_date.isoformat()} already exists")
    await session.refresh(report)

    if report.is_completed:
        guard.invalidate(tenant.id)
        logger.info(
            "day_closed",
            tenant_id=str(tenant.id),
            closing_date=report.closing_date.isoformat(),
            closed_by=str(user_id),
        )
    return report


async def complete_report(
    session: AsyncSession,
    guard: DayClosingGuard,
    tenant: VerifiedTenant,
    report_id: uuid.UUID,
) -> DayEndReport:
    """Finalize a draft report; completing an already completed report is a no-op"""
    report = await get_report(session, tenant, report_id)
    if report.is_completed:
        return report

    report.is_completed = True
    report.completed_at = utcnow()
    report.updated_at = report.completed_at
    session.add(report)
    await session.commit()
    await session.refresh(report)

    guard.invalidate(tenant.id)
    logger.info("day_closed", tenant_id=str(tenant.id), closing_date=report.closing_date.isoformat())
    return report


async def get_report(session: AsyncSession, tenant: VerifiedTenant, report_id: uuid.UUID) -> DayEndReport:
    result = await session.exec(
        select(DayEndReport).where(
            DayEndReport.id == report_id,
            DayEndReport.tenant_id == tenant.id,
        )
    )
    report = result.first()
    if not report:
        raise NotFoundError("Day-end report")
    return report


async def list_reports(
    session: AsyncSession,
    tenant: VerifiedTenant,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 31,
) -> List[DayEndReport]:
    query = select(DayEndReport).where(DayEndReport.tenant_id == tenant.id)
    if date_from:
        query = query.where(DayEndReport.closing_date >= date_from)
    if date_to:
        query = query.where(DayEndReport.closing_date <= date_to)
    query = query.order_by(DayEndReport.closing_date.desc()).offset(skip).limit(limit)
    result = await session.exec(query)
    return list(result.all())
