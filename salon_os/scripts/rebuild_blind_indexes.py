"""
Rebuild customer phone blind indexes

Run after rotating BLIND_INDEX_SECRET: every stored phone number is decrypted
with the field cipher and its full-number hash and prefix tokens are
regenerated with the current secret. Records that cannot be decrypted are
left untouched and counted.

    python -m salon_os.scripts.rebuild_blind_indexes
"""

import asyncio
import sys
from typing import Callable, Dict

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from salon_os.core.crypto import DECRYPTION_ERROR
from salon_os.core.database import async_session_maker
from salon_os.models.customer import Customer
from salon_os.services.customers import CustomerDirectory, get_customer_directory

logger = structlog.get_logger(__name__)


async def rebuild_blind_indexes(session: AsyncSession, directory: CustomerDirectory, batch_size: int = 500) -> Dict[str, int]:
    """Re-index every customer phone number, committing once per batch"""
    results = {"processed": 0, "rebuilt": 0, "skipped": 0}
    offset = 0

    while True:
        batch = (await session.exec(
            select(Customer).order_by(Customer.id).offset(offset).limit(batch_size)
        )).all()
        if not batch:
            break
        offset += len(batch)

        for customer in batch:
            results["processed"] += 1
            phone_number = directory.cipher.decrypt(customer.phone_number)
            if phone_number == DECRYPTION_ERROR or not phone_number:
                results["skipped"] += 1
                logger.warning(
                    "blind_index_rebuild_skipped",
                    tenant_id=str(customer.tenant_id),
                    customer_id=str(customer.id),
                )
                continue
            await directory.replace_phone_index(session, customer, directory.index_phone(phone_number))
            session.add(customer)
            results["rebuilt"] += 1

        await session.commit()
        logger.info("blind_index_rebuild_batch", **results)

    return results


async def run(session_factory: Callable[[], AsyncSession] = async_session_maker) -> Dict[str, int]:
    directory = get_customer_directory()
    async with session_factory() as session:
        try:
            return await rebuild_blind_indexes(session, directory)
        except Exception:
            await session.rollback()
            raise


def main():
    """Main entry point for the rebuild job"""
    logger.info("Starting blind index rebuild")
    try:
        results = asyncio.run(run())
    except Exception as e:
        logger.error("blind_index_rebuild_failed", error=str(e))
        sys.exit(1)
    logger.info("Blind index rebuild complete", **results)


if __name__ == "__main__":
    main()
