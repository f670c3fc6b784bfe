"""
Day-closing guard

Answers "is this tenant's ledger closed for this date?" from a per-tenant
cache of the latest completed closing date. Entries never expire on their
own: whoever finalizes a closing must call ``invalidate`` for that tenant, or
the guard keeps serving the old answer.

The guard only answers. Refusing the mutation is the caller's job, normally
through ``ensure_ledger_open``.
"""

from datetime import date, datetime
from typing import Dict, Optional, Protocol, Union
import uuid

import structlog

from salon_os.core.exceptions import DayClosedError, LedgerUnavailableError

logger = structlog.get_logger(__name__)


class _NotLoaded:
    def __repr__(self) -> str:
        return "NOT_LOADED"


# Cache marker for "never looked up"; a cached None means "no closings yet"
NOT_LOADED = _NotLoaded()

CachedClosing = Union[date, None, _NotLoaded]


class ClosingLedger(Protocol):
    """Authoritative source of completed closings"""

    async def latest_closed_date(self, tenant_id: uuid.UUID) -> Optional[date]:
        ...


class ClosingDateCache:
    """Per-tenant latest closed date. Entries are replaced whole, never merged.

    Each tenant also has a generation that ``invalidate`` bumps. A value read
    from the ledger is only stored if no invalidation happened while it was
    being read.
    """

    def __init__(self):
        self._entries: Dict[uuid.UUID, Optional[date]] = {}
        self._generations: Dict[uuid.UUID, int] = {}

    def get(self, tenant_id: uuid.UUID) -> CachedClosing:
        return self._entries.get(tenant_id, NOT_LOADED)

    def generation(self, tenant_id: uuid.UUID) -> int:
        return self._generations.get(tenant_id, 0)

    def set(self, tenant_id: uuid.UUID, closed_through: Optional[date], generation: int) -> bool:
        """Store ``closed_through`` unless the tenant was invalidated since ``generation``"""
        if self.generation(tenant_id) != generation:
            return False
        self._entries[tenant_id] = closed_through
        return True

    def invalidate(self, tenant_id: uuid.UUID) -> None:
        self._generations[tenant_id] = self.generation(tenant_id) + 1
        self._entries.pop(tenant_id, None)


def _as_day(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


class DayClosingGuard:
    """Reports whether a tenant's ledger is closed for a given date"""

    def __init__(self, ledger: ClosingLedger, cache: Optional[ClosingDateCache] = None):
        self.ledger = ledger
        self.cache = cache if cache is not None else ClosingDateCache()

    async def latest_closed_date(self, tenant_id: uuid.UUID) -> Optional[date]:
        cached = self.cache.get(tenant_id)
        if cached is not NOT_LOADED:
            return cached

        # Ledger errors propagate; nothing is cached on failure
        generation = self.cache.generation(tenant_id)
        closed_through = await self.ledger.latest_closed_date(tenant_id)
        if self.cache.set(tenant_id, closed_through, generation):
            logger.debug("closing_cache_loaded", tenant_id=str(tenant_id), closed_through=closed_through)
        else:
            logger.info("closing_cache_fill_discarded", tenant_id=str(tenant_id))
        return closed_through

    async def is_date_locked(self, tenant_id: uuid.UUID, when: Union[date, datetime]) -> bool:
        closed_through = await self.latest_closed_date(tenant_id)
        if closed_through is None:
            return False
        return _as_day(when) <= closed_through

    def invalidate(self, tenant_id: uuid.UUID) -> None:
        self.cache.invalidate(tenant_id)
        logger.info("closing_cache_invalidated", tenant_id=str(tenant_id))


async def ensure_ledger_open(
    guard: DayClosingGuard,
    tenant_id: uuid.UUID,
    *days: Union[date, datetime],
) -> None:
    """Raise unless every given date is still open for financial mutation.

    A failed lookup is treated as locked: the mutation is refused with
    ``LedgerUnavailableError`` rather than allowed blindly.
    """
    for day in days:
        try:
            locked = await guard.is_date_locked(tenant_id, day)
        except Exception as e:
            logger.error(
                "closing_lookup_failed",
                tenant_id=str(tenant_id),
                error_type=type(e).__name__,
            )
            raise LedgerUnavailableError() from e
        if locked:
            raise DayClosedError(_as_day(day))
