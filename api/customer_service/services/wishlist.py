# customer_service/services/wishlist.py
"""
Wishlist Service - variant-aware deduplication.

An entry is identified by (owner, product, variant-or-none). The no-variant
case is a key of its own: it does not match, and is not matched by, any
specific variant of the same product.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.database import transaction
from customer_service.db_models import WishlistItem, NO_VARIANT, variant_key_for
from customer_service.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WishlistKey:
    """Identity of a wishlist entry within one owner's list."""

    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None

    @property
    def variant_key(self) -> str:
        return variant_key_for(self.variant_id)

    @property
    def value(self) -> str:
        """Canonical string, e.g. '<product>:<variant>' or '<product>:none'."""
        return f"{self.product_id}:{self.variant_key}"

    @property
    def has_variant(self) -> bool:
        return self.variant_key != NO_VARIANT

    @classmethod
    def of(cls, item: WishlistItem) -> "WishlistKey":
        return cls(item.product_id, item.variant_id)

    def __str__(self) -> str:
        return self.value


class WishlistService:
    """Service for managing a customer's wishlist."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Add / Remove
    # =========================================================================

    async def add(
        self,
        owner_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> WishlistItem:
        """
        Add a product (or one of its variants). Adding a key that is already
        on the list is a no-op and returns the existing entry.
        """
        key = WishlistKey(product_id, variant_id)
        details = dict(details or {})
        async with transaction(self.db):
            # Insert first so the transaction opens with a write; the unique
            # key decides between concurrent adds.
            item = WishlistItem(
                user_id=owner_id,
                product_id=product_id,
                variant_id=variant_id,
                variant_key=key.variant_key,
                variant_sku=details.get("variant_sku"),
                variant_name=details.get("variant_name"),
                price_at_add=Decimal(str(details.get("price_at_add") or 0)),
                notify_on_sale=bool(details.get("notify_on_sale", False)),
                product_name=details.get("product_name"),
                product_slug=details.get("product_slug"),
                product_image=details.get("product_image"),
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(item)
            except IntegrityError:
                existing = await self._find(owner_id, key)
                if existing is None:
                    raise
                return existing

        logger.info(f"Wishlist: {owner_id} added {key}")
        return item

    async def remove(
        self,
        owner_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Remove exactly this key; without variant_id only the product-level entry goes."""
        key = WishlistKey(product_id, variant_id)
        stmt = delete(WishlistItem).where(
            WishlistItem.user_id == owner_id,
            WishlistItem.product_id == product_id,
            WishlistItem.variant_key == key.variant_key,
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Item not in wishlist")

    async def remove_all_variants_of_product(self, owner_id: uuid.UUID, product_id: uuid.UUID) -> int:
        """Remove the product-level entry and every variant entry of the product."""
        stmt = delete(WishlistItem).where(
            WishlistItem.user_id == owner_id,
            WishlistItem.product_id == product_id,
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Item not in wishlist")
            return result.rowcount

    async def remove_by_id(self, owner_id: uuid.UUID, item_id: uuid.UUID) -> None:
        stmt = delete(WishlistItem).where(WishlistItem.id == item_id, WishlistItem.user_id == owner_id)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Item not found")

    async def update_notify_on_sale(self, owner_id: uuid.UUID, item_id: uuid.UUID, notify: bool) -> None:
        stmt = (
            update(WishlistItem)
            .where(WishlistItem.id == item_id, WishlistItem.user_id == owner_id)
            .values(notify_on_sale=notify)
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Item not found")

    # =========================================================================
    # Lookup
    # =========================================================================

    async def exists(
        self,
        owner_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """Exact-key existence check."""
        async with transaction(self.db):
            return await self._find(owner_id, WishlistKey(product_id, variant_id)) is not None

    async def exists_any_variant(self, owner_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        stmt = (
            select(WishlistItem.id)
            .where(WishlistItem.user_id == owner_id, WishlistItem.product_id == product_id)
            .limit(1)
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none() is not None

    async def list(self, owner_id: uuid.UUID) -> List[WishlistItem]:
        stmt = (
            select(WishlistItem)
            .where(WishlistItem.user_id == owner_id)
            .order_by(WishlistItem.created_at.desc())
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def count(self, owner_id: uuid.UUID) -> int:
        stmt = select(func.count(WishlistItem.id)).where(WishlistItem.user_id == owner_id)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return int(result.scalar_one())

    async def items_for_price_drop_alert(self) -> List[WishlistItem]:
        """All entries whose owners asked to hear about price drops."""
        stmt = select(WishlistItem).where(WishlistItem.notify_on_sale == True)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def _find(self, owner_id: uuid.UUID, key: WishlistKey) -> Optional[WishlistItem]:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == owner_id,
            WishlistItem.product_id == key.product_id,
            WishlistItem.variant_key == key.variant_key,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
