# customer_service/services/back_in_stock.py
"""
Back-in-stock subscription registry.

Subscriptions are keyed by (customer, product, variant-or-none). They start
pending and move to notified exactly once, through `mark_notified`.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, asdict
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, delete, update, func, distinct
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from customer_service.database import transaction
from customer_service.db_models import BackInStockSubscription, utcnow, variant_key_for
from customer_service.errors import NotFoundError

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = ("product_name", "product_slug", "product_image", "variant_sku", "variant_name")


@dataclass
class BackInStockStats:
    total_subscriptions: int = 0
    pending_notifications: int = 0
    sent_notifications: int = 0
    unique_products: int = 0
    unique_customers: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class BackInStockRegistry:
    """Stores and queries back-in-stock subscriptions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Customer operations
    # =========================================================================

    async def subscribe(
        self,
        customer_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> BackInStockSubscription:
        """Create a pending subscription, or return the existing one for this key unchanged."""
        details = details or {}
        async with transaction(self.db):
            # Same insert-first pattern as WishlistService.add
            subscription = BackInStockSubscription(
                customer_id=customer_id,
                product_id=product_id,
                variant_id=variant_id,
                variant_key=variant_key_for(variant_id),
                is_notified=False,
                **{k: details.get(k) for k in _DETAIL_FIELDS},
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(subscription)
            except IntegrityError:
                existing = await self._find(customer_id, product_id, variant_id)
                if existing is None:
                    raise
                return existing

        logger.info(f"Back-in-stock: {customer_id} subscribed to {product_id} (variant={variant_id})")
        return subscription

    async def unsubscribe(
        self,
        customer_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> None:
        stmt = delete(BackInStockSubscription).where(
            BackInStockSubscription.customer_id == customer_id,
            BackInStockSubscription.product_id == product_id,
            BackInStockSubscription.variant_key == variant_key_for(variant_id),
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Subscription not found")

    async def unsubscribe_by_id(self, customer_id: uuid.UUID, subscription_id: uuid.UUID) -> None:
        """Delete by id; another customer's subscription is reported as not found."""
        stmt = delete(BackInStockSubscription).where(
            BackInStockSubscription.id == subscription_id,
            BackInStockSubscription.customer_id == customer_id,
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Subscription not found")

    async def list_for_customer(self, customer_id: uuid.UUID) -> List[BackInStockSubscription]:
        stmt = (
            select(BackInStockSubscription)
            .where(BackInStockSubscription.customer_id == customer_id)
            .order_by(BackInStockSubscription.created_at.desc())
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def is_subscribed(
        self,
        customer_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> bool:
        async with transaction(self.db):
            return await self._find(customer_id, product_id, variant_id) is not None

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def pending_for_product(
        self,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> List[BackInStockSubscription]:
        """
        Pending subscriptions for a product, with the subscriber profile loaded.

        With a variant only that variant's subscriptions match. Without one,
        every pending subscription of the product matches, variant-specific
        ones included.
        """
        stmt = (
            select(BackInStockSubscription)
            .options(selectinload(BackInStockSubscription.customer))
            .where(
                BackInStockSubscription.product_id == product_id,
                BackInStockSubscription.is_notified == False,
            )
            .order_by(BackInStockSubscription.created_at)
        )
        if variant_id is not None:
            stmt = stmt.where(BackInStockSubscription.variant_id == variant_id)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def mark_notified(self, subscription_ids: Iterable[uuid.UUID]) -> int:
        """
        Flag the given subscriptions as notified in one statement.

        Already-notified rows are left alone, so repeating a call neither fails
        nor moves notified_at. Returns the number of rows that changed.
        """
        ids = list(dict.fromkeys(subscription_ids))
        if not ids:
            return 0
        stmt = (
            update(BackInStockSubscription)
            .where(
                BackInStockSubscription.id.in_(ids),
                BackInStockSubscription.is_notified == False,
            )
            .values(is_notified=True, notified_at=utcnow())
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return result.rowcount

    # =========================================================================
    # Admin
    # =========================================================================

    async def stats(self) -> BackInStockStats:
        model = BackInStockSubscription
        async with transaction(self.db):
            total = (await self.db.execute(select(func.count(model.id)))).scalar_one()
            pending = (await self.db.execute(
                select(func.count(model.id)).where(model.is_notified == False)
            )).scalar_one()
            products = (await self.db.execute(select(func.count(distinct(model.product_id))))).scalar_one()
            customers = (await self.db.execute(select(func.count(distinct(model.customer_id))))).scalar_one()
        return BackInStockStats(
            total_subscriptions=total,
            pending_notifications=pending,
            sent_notifications=total - pending,
            unique_products=products,
            unique_customers=customers,
        )

    async def list_all(self, pending_only: bool = False, limit: int = 100) -> List[BackInStockSubscription]:
        stmt = select(BackInStockSubscription).order_by(BackInStockSubscription.created_at.desc()).limit(limit)
        if pending_only:
            stmt = stmt.where(BackInStockSubscription.is_notified == False)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def delete_old_notified(self, older_than_days: int) -> int:
        """Cleanup of notified subscriptions whose notification is older than N days."""
        cutoff = utcnow() - timedelta(days=older_than_days)
        stmt = delete(BackInStockSubscription).where(
            BackInStockSubscription.is_notified == True,
            BackInStockSubscription.notified_at < cutoff,
        ).execution_options(synchronize_session=False)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            deleted = result.rowcount
        logger.info(f"Back-in-stock cleanup removed {deleted} notified subscriptions older than {older_than_days} days")
        return deleted

    async def _find(
        self,
        customer_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID],
    ) -> Optional[BackInStockSubscription]:
        stmt = select(BackInStockSubscription).where(
            BackInStockSubscription.customer_id == customer_id,
            BackInStockSubscription.product_id == product_id,
            BackInStockSubscription.variant_key == variant_key_for(variant_id),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
