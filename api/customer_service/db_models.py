# customer_service/db_models.py
"""
SQLAlchemy ORM Models for the customer service.

One mapping per concept: profiles, addresses, measurements, wishlist items and
back-in-stock subscriptions. Customer ids come from the auth service, so owner
columns are plain indexed UUIDs rather than foreign keys.
"""
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    String, Boolean, Text, DateTime, Numeric, Index, UniqueConstraint, Uuid,
    Enum as SQLEnum, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from customer_service.database import Base
from customer_service.value_objects import CustomerStatus

# Stored in variant_key when an entry has no variant; never a valid UUID string
NO_VARIANT = "none"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def variant_key_for(variant_id: Optional[uuid.UUID]) -> str:
    return str(variant_id) if variant_id is not None else NO_VARIANT


# ============================================================================
# MIXINS
# ============================================================================

class TimestampMixin:
    """Mixin for created_at and updated_at columns."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )


class DefaultableMixin:
    """Owner-partitioned rows where at most one per owner may be the default."""
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# ============================================================================
# 1. CUSTOMERS (profile)
# ============================================================================

class Customer(TimestampMixin, Base):
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    status: Mapped[CustomerStatus] = mapped_column(
        SQLEnum(CustomerStatus, name="customer_status"),
        default=CustomerStatus.active,
        nullable=False,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ============================================================================
# 2. ADDRESSES
# ============================================================================

class Address(DefaultableMixin, TimestampMixin, Base):
    __tablename__ = "addresses"

    label: Mapped[str] = mapped_column(String(50), nullable=False)  # Home, Office, Other
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    address_line1: Mapped[str] = mapped_column(String(500), nullable=False)
    address_line2: Mapped[Optional[str]] = mapped_column(String(500))
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    postcode: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), default="USA", nullable=False)

    __table_args__ = (
        # At most one default address per customer
        Index("idx_addresses_one_default", "user_id", unique=True,
              postgresql_where=text("is_default = true"),
              sqlite_where=text("is_default = 1")),
    )


# ============================================================================
# 3. MEASUREMENTS (cm / kg)
# ============================================================================

class CustomerMeasurement(DefaultableMixin, TimestampMixin, Base):
    __tablename__ = "customer_measurements"

    name: Mapped[Optional[str]] = mapped_column(String(100))  # e.g. "Wedding suit"
    gender: Mapped[str] = mapped_column(String(20), nullable=False)  # men, women

    # Upper body
    bust: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    chest: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    waist: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    hip: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    shoulder_width: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    arm_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))

    # Lower body
    inseam: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    outseam: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    thigh: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))

    # Additional
    neck: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    wrist: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    height: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 1))

    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("idx_measurements_one_default", "user_id", unique=True,
              postgresql_where=text("is_default = true"),
              sqlite_where=text("is_default = 1")),
    )


# ============================================================================
# 4. WISHLIST
# ============================================================================

class WishlistItem(TimestampMixin, Base):
    __tablename__ = "wishlist_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)  # null = product level
    variant_key: Mapped[str] = mapped_column(String(36), nullable=False)
    variant_sku: Mapped[Optional[str]] = mapped_column(String(50))
    variant_name: Mapped[Optional[str]] = mapped_column(String(100))  # e.g. "Red / Large"

    # Price tracking for price drop alerts
    price_at_add: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    notify_on_sale: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Denormalized product info for display without joining
    product_name: Mapped[Optional[str]] = mapped_column(String(255))
    product_slug: Mapped[Optional[str]] = mapped_column(String(255))
    product_image: Mapped[Optional[str]] = mapped_column(String(500))

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", "variant_key", name="uq_wishlist_items_key"),
        Index("idx_wishlist_items_notify", "notify_on_sale"),
    )


# ============================================================================
# 5. BACK-IN-STOCK SUBSCRIPTIONS
# ============================================================================

class BackInStockSubscription(TimestampMixin, Base):
    __tablename__ = "back_in_stock_subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, index=True)
    variant_key: Mapped[str] = mapped_column(String(36), nullable=False)

    # Denormalized product info
    product_name: Mapped[Optional[str]] = mapped_column(String(255))
    product_slug: Mapped[Optional[str]] = mapped_column(String(255))
    product_image: Mapped[Optional[str]] = mapped_column(String(500))
    variant_sku: Mapped[Optional[str]] = mapped_column(String(100))
    variant_name: Mapped[Optional[str]] = mapped_column(String(255))

    # Notification tracking
    is_notified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Profile may not exist yet for a subscriber
    customer: Mapped[Optional["Customer"]] = relationship(
        primaryjoin="foreign(BackInStockSubscription.customer_id) == Customer.id",
        viewonly=True,
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("customer_id", "product_id", "variant_key", name="uq_back_in_stock_key"),
        Index("idx_back_in_stock_pending", "product_id", "is_notified"),
    )
