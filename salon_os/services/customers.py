"""
Customer directory with encrypted contact details and blind-index search
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Set, Tuple
import re
import uuid

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from salon_os.core.blind_index import BlindIndexer, canonicalize_digits, get_blind_indexer
from salon_os.core.crypto import FieldCipher, get_field_cipher
from salon_os.core.exceptions import ConflictError, NotFoundError
from salon_os.core.tenancy import VerifiedTenant
from salon_os.models.base import utcnow
from salon_os.models.customer import Customer, CustomerPhoneToken
from salon_os.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate

logger = structlog.get_logger(__name__)

# Queries made only of digits and phone punctuation search the phone index
_PHONE_QUERY = re.compile(r"^[\d\s\-+().]+$")


@dataclass(frozen=True)
class PhoneIndex:
    """Everything stored for one phone number"""
    digits: str
    ciphertext: str
    phone_hash: str
    tokens: Set[str]

    @property
    def last4(self) -> str:
        return self.digits[-4:]


class CustomerDirectory:
    """Tenant-scoped customer storage; plaintext never reaches the database"""

    def __init__(self, cipher: FieldCipher, indexer: BlindIndexer):
        self.cipher = cipher
        self.indexer = indexer

    def index_phone(self, phone_number: str) -> PhoneIndex:
        digits = canonicalize_digits(phone_number)
        return PhoneIndex(
            digits=digits,
            ciphertext=self.cipher.encrypt(digits),
            phone_hash=self.indexer.blind_index(digits),
            tokens=self.indexer.prefix_tokens(digits),
        )

    def to_read(self, customer: Customer) -> CustomerRead:
        return CustomerRead(
            id=customer.id,
            name=self.cipher.decrypt(customer.name),
            phone_number=self.cipher.decrypt(customer.phone_number),
            email=self.cipher.decrypt_optional(customer.email),
            last4_phone_number=customer.last4_phone_number,
            gender=customer.gender,
            is_active=customer.is_active,
            created_at=customer.created_at,
        )

    # Writes

    async def create(self, session: AsyncSession, tenant: VerifiedTenant, data: CustomerCreate) -> Customer:
        phone = self.index_phone(data.phone_number)
        if await self._find_by_hash(session, tenant, phone.phone_hash):
            raise ConflictError("A customer with this phone number already exists")

        customer = Customer(
            tenant_id=tenant.id,
            name=self.cipher.encrypt(data.name),
            phone_number=phone.ciphertext,
            email=self.cipher.encrypt_optional(data.email),
            phone_hash=phone.phone_hash,
            searchable_name=data.name.lower(),
            last4_phone_number=phone.last4,
            gender=data.gender,
        )
        session.add(customer)
        try:
            await session.flush()
            self._add_tokens(session, tenant.id, customer.id, phone.tokens)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError("A customer with this phone number already exists")
        await session.refresh(customer)
        logger.info("customer_created", tenant_id=str(tenant.id), customer_id=str(customer.id))
        return customer

    async def update(
        self,
        session: AsyncSession,
        tenant: VerifiedTenant,
        customer_id: uuid.UUID,
        data: CustomerUpdate,
    ) -> Customer:
        customer = await self.get(session, tenant, customer_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes and data.name:
            customer.name = self.cipher.encrypt(data.name)
            customer.searchable_name = data.name.lower()
        if "email" in changes:
            customer.email = self.cipher.encrypt_optional(data.email)
        if "gender" in changes:
            customer.gender = data.gender
        if "is_active" in changes and data.is_active is not None:
            customer.is_active = data.is_active
        new_phone = None
        if "phone_number" in changes and data.phone_number:
            phone = self.index_phone(data.phone_number)
            if phone.phone_hash != customer.phone_hash:
                duplicate = await self._find_by_hash(session, tenant, phone.phone_hash)
                if duplicate and duplicate.id != customer.id:
                    raise ConflictError("A customer with this phone number already exists")
                new_phone = phone

        customer.updated_at = utcnow()
        session.add(customer)
        try:
            if new_phone:
                await self.replace_phone_index(session, customer, new_phone)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError("A customer with this phone number already exists")
        await session.refresh(customer)
        return customer

    async def replace_phone_index(self, session: AsyncSession, customer: Customer, phone: PhoneIndex) -> None:
        """Swap the stored phone, its hash and its prefix tokens within the customer's own tenant (caller commits)"""
        customer.phone_number = phone.ciphertext
        customer.phone_hash = phone.phone_hash
        customer.last4_phone_number = phone.last4
        await session.execute(
            delete(CustomerPhoneToken).where(
                CustomerPhoneToken.tenant_id == customer.tenant_id,
                CustomerPhoneToken.customer_id == customer.id,
            )
        )
        self._add_tokens(session, customer.tenant_id, customer.id, phone.tokens)

    def _add_tokens(self, session: AsyncSession, tenant_id: uuid.UUID, customer_id: uuid.UUID, tokens: Set[str]):
        for token in sorted(tokens):
            session.add(CustomerPhoneToken(tenant_id=tenant_id, customer_id=customer_id, token=token))

    # Reads

    async def get(self, session: AsyncSession, tenant: VerifiedTenant, customer_id: uuid.UUID) -> Customer:
        result = await session.exec(
            select(Customer).where(Customer.id == customer_id, Customer.tenant_id == tenant.id)
        )
        customer = result.first()
        if not customer:
            raise NotFoundError("Customer")
        return customer

    async def find_by_phone(self, session: AsyncSession, tenant: VerifiedTenant, phone_number: str) -> Optional[Customer]:
        """Exact match on the full number"""
        digits = canonicalize_digits(phone_number)
        if not digits:
            return None
        return await self._find_by_hash(session, tenant, self.indexer.blind_index(digits))

    async def _find_by_hash(self, session: AsyncSession, tenant: VerifiedTenant, phone_hash: str) -> Optional[Customer]:
        result = await session.exec(
            select(Customer).where(Customer.tenant_id == tenant.id, Customer.phone_hash == phone_hash)
        )
        return result.first()

    async def search(
        self,
        session: AsyncSession,
        tenant: VerifiedTenant,
        query: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Customer], int]:
        """Active customers matching ``query``, newest first, with the total match count.

        A phone-like query matches numbers that start with its digits, via an
        equality lookup on the stored prefix tokens.
        """
        statement = select(Customer).where(Customer.tenant_id == tenant.id, Customer.is_active == True)  # noqa: E712
        query = (query or "").strip()
        if query and _PHONE_QUERY.match(query) and canonicalize_digits(query):
            token = self.indexer.blind_index(canonicalize_digits(query))
            statement = statement.join(
                CustomerPhoneToken, CustomerPhoneToken.customer_id == Customer.id
            ).where(
                CustomerPhoneToken.tenant_id == tenant.id,
                CustomerPhoneToken.token == token,
            )
        elif query:
            statement = statement.where(Customer.searchable_name.contains(query.lower(), autoescape=True))

        count_result = await session.exec(select(func.count()).select_from(statement.subquery()))
        total = count_result.one()

        statement = statement.order_by(Customer.created_at.desc()).offset((page - 1) * limit).limit(limit)
        result = await session.exec(statement)
        return list(result.all()), total


@lru_cache()
def get_customer_directory() -> CustomerDirectory:
    """Process-wide directory (FastAPI dependency)"""
    return CustomerDirectory(get_field_cipher(), get_blind_indexer())
