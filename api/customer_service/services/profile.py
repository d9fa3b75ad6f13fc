# customer_service/services/profile.py
from __future__ import annotations
import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.database import transaction
from customer_service.db_models import Customer, utcnow
from customer_service.errors import NotFoundError
from customer_service.value_objects import CustomerStatus, Email, PersonName, Phone

logger = logging.getLogger(__name__)


@dataclass
class CustomerStats:
    total_customers: int = 0
    active_customers: int = 0
    new_customers_today: int = 0
    new_customers_month: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class ProfileService:
    """Customer profile (one row per customer id issued by the auth service)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, customer_id: uuid.UUID) -> Customer:
        async with transaction(self.db):
            customer = await self._find(customer_id)
        if customer is None:
            raise NotFoundError("Profile not found")
        return customer

    async def upsert(
        self,
        customer_id: uuid.UUID,
        email: Email,
        name: PersonName,
        phone: Optional[Phone] = None,
        status: Optional[CustomerStatus] = None,
    ) -> Customer:
        async with transaction(self.db):
            customer = await self._find(customer_id)
            if customer is None:
                customer = Customer(id=customer_id)
                self.db.add(customer)
                logger.info(f"Profile created for {customer_id}")
            customer.email = email.value
            customer.first_name = name.first
            customer.last_name = name.last
            customer.phone = phone.value if phone is not None else None
            if status is not None:
                customer.status = status
            elif customer.status is None:
                customer.status = CustomerStatus.active
            await self.db.flush()
        return customer

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def list_customers(
        self,
        status: Optional[CustomerStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Customer], int]:
        """Newest first; `search` matches email or either name part. Returns (page, total)."""
        conditions = []
        if status is not None:
            conditions.append(Customer.status == status)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            conditions.append(or_(
                func.lower(Customer.email).like(pattern),
                func.lower(Customer.first_name).like(pattern),
                func.lower(Customer.last_name).like(pattern),
            ))

        stmt = (
            select(Customer)
            .where(*conditions)
            .order_by(Customer.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        async with transaction(self.db):
            total = (await self.db.execute(select(func.count(Customer.id)).where(*conditions))).scalar_one()
            result = await self.db.execute(stmt)
            return list(result.scalars()), total

    async def create_customer(
        self,
        email: Email,
        name: PersonName,
        phone: Optional[Phone] = None,
        status: CustomerStatus = CustomerStatus.active,
    ) -> Customer:
        """Create a profile under a new id; a taken email is a ConflictError."""
        customer = Customer(
            id=uuid.uuid4(),
            email=email.value,
            first_name=name.first,
            last_name=name.last,
            phone=phone.value if phone is not None else None,
            status=status,
        )
        async with transaction(self.db):
            self.db.add(customer)
            await self.db.flush()
        logger.info(f"Admin created customer {customer.id} ({email})")
        return customer

    async def update_customer(
        self,
        customer_id: uuid.UUID,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[Phone] = None,
        status: Optional[CustomerStatus] = None,
    ) -> Customer:
        """Apply the given parts; anything left as None is unchanged."""
        async with transaction(self.db):
            customer = await self._find(customer_id)
            if customer is None:
                raise NotFoundError("Customer not found")
            if first_name is not None or last_name is not None:
                name = PersonName(
                    customer.first_name if first_name is None else first_name,
                    customer.last_name if last_name is None else last_name,
                )
                customer.first_name = name.first
                customer.last_name = name.last
            if phone is not None:
                customer.phone = phone.value
            if status is not None and status != customer.status:
                logger.info(f"Customer {customer_id} status {customer.status.value} -> {status.value}")
                customer.status = status
            await self.db.flush()
        return customer

    async def delete_customer(self, customer_id: uuid.UUID) -> None:
        """Remove the profile row. Addresses, measurements and lists keyed by the id are kept."""
        async with transaction(self.db):
            result = await self.db.execute(delete(Customer).where(Customer.id == customer_id))
            if result.rowcount == 0:
                raise NotFoundError("Customer not found")
        logger.info(f"Admin deleted customer {customer_id}")

    async def stats(self) -> CustomerStats:
        now = utcnow()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_start = day_start.replace(day=1)
        count = select(func.count(Customer.id))
        async with transaction(self.db):
            total = (await self.db.execute(count)).scalar_one()
            active = (await self.db.execute(count.where(Customer.status == CustomerStatus.active))).scalar_one()
            today = (await self.db.execute(count.where(Customer.created_at >= day_start))).scalar_one()
            month = (await self.db.execute(count.where(Customer.created_at >= month_start))).scalar_one()
        return CustomerStats(
            total_customers=total,
            active_customers=active,
            new_customers_today=today,
            new_customers_month=month,
        )

    async def _find(self, customer_id: uuid.UUID) -> Optional[Customer]:
        result = await self.db.execute(select(Customer).where(Customer.id == customer_id))
        return result.scalar_one_or_none()
