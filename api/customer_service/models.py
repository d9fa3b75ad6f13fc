# customer_service/models.py
"""
Pydantic request/response schemas for the HTTP API.
"""
from __future__ import annotations
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from customer_service.errors import ValidationError
from customer_service.value_objects import CustomerStatus, Email, PersonName, Phone


def _valid_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return Phone(value).value
    except ValidationError as e:
        raise ValueError(e.message) from None


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Profile
# ============================================================================

class ProfileIn(BaseModel):
    email: str
    first_name: str
    last_name: str = ""
    phone: Optional[str] = None
    status: Optional[CustomerStatus] = None

    def value_objects(self):
        """Validated (Email, PersonName, Phone|None); raises ValidationError."""
        phone = Phone(self.phone) if self.phone else None
        return Email(self.email), PersonName(self.first_name, self.last_name), phone


class ProfileOut(ORMModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    status: CustomerStatus
    created_at: datetime
    updated_at: datetime


class AdminCustomerCreate(ProfileIn):
    """Admin-created profile; the service assigns a new id."""


class AdminCustomerUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[CustomerStatus] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _valid_phone(v)


class CustomerListOut(BaseModel):
    customers: List[ProfileOut]
    total: int
    page: int
    limit: int


class CustomerStatsOut(BaseModel):
    total_customers: int
    active_customers: int
    new_customers_today: int
    new_customers_month: int


# ============================================================================
# Addresses
# ============================================================================

class AddressFields(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    recipient_name: str = Field(min_length=1, max_length=200)
    phone: str
    address_line1: str = Field(min_length=1, max_length=500)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postcode: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _valid_phone(v)


class AddressCreate(AddressFields):
    is_default: bool = False

    def item_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"is_default"})


class AddressUpdate(BaseModel):
    label: Optional[str] = Field(default=None, max_length=50)
    recipient_name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = None
    address_line1: Optional[str] = Field(default=None, max_length=500)
    address_line2: Optional[str] = None
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    postcode: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None, max_length=100)
    is_default: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v is None or not v.strip():
            return v
        return _valid_phone(v)

    def item_fields(self) -> Dict[str, Any]:
        # Blank strings mean "leave unchanged"
        return {
            k: v for k, v in self.model_dump(exclude={"is_default"}, exclude_none=True).items()
            if not (isinstance(v, str) and not v.strip())
        }


class AddressOut(ORMModel):
    id: uuid.UUID
    user_id: uuid.UUID
    label: str
    recipient_name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postcode: str
    country: str
    is_default: bool
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Measurements (cm / kg)
# ============================================================================

_Measure = Optional[Decimal]


class MeasurementFields(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    bust: _Measure = Field(default=None, ge=0, le=9999)
    chest: _Measure = Field(default=None, ge=0, le=9999)
    waist: _Measure = Field(default=None, ge=0, le=9999)
    hip: _Measure = Field(default=None, ge=0, le=9999)
    shoulder_width: _Measure = Field(default=None, ge=0, le=9999)
    arm_length: _Measure = Field(default=None, ge=0, le=9999)
    inseam: _Measure = Field(default=None, ge=0, le=9999)
    outseam: _Measure = Field(default=None, ge=0, le=9999)
    thigh: _Measure = Field(default=None, ge=0, le=9999)
    neck: _Measure = Field(default=None, ge=0, le=9999)
    wrist: _Measure = Field(default=None, ge=0, le=9999)
    height: _Measure = Field(default=None, ge=0, le=9999)
    weight: _Measure = Field(default=None, ge=0, le=9999)
    notes: Optional[str] = None


class MeasurementCreate(MeasurementFields):
    gender: Literal["men", "women"]
    is_default: bool = False

    def item_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"is_default"})


class MeasurementUpdate(MeasurementFields):
    gender: Optional[Literal["men", "women"]] = None
    is_default: Optional[bool] = None

    def item_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"is_default"}, exclude_unset=True)


class MeasurementOut(ORMModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: Optional[str] = None
    gender: str
    bust: _Measure = None
    chest: _Measure = None
    waist: _Measure = None
    hip: _Measure = None
    shoulder_width: _Measure = None
    arm_length: _Measure = None
    inseam: _Measure = None
    outseam: _Measure = None
    thigh: _Measure = None
    neck: _Measure = None
    wrist: _Measure = None
    height: _Measure = None
    weight: _Measure = None
    notes: Optional[str] = None
    is_default: bool
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Wishlist
# ============================================================================

class WishlistAdd(BaseModel):
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    variant_sku: Optional[str] = Field(default=None, max_length=50)
    variant_name: Optional[str] = Field(default=None, max_length=100)
    price_at_add: Decimal = Field(default=Decimal("0"), ge=0)
    notify_on_sale: bool = False
    product_name: Optional[str] = Field(default=None, max_length=255)
    product_slug: Optional[str] = Field(default=None, max_length=255)
    product_image: Optional[str] = Field(default=None, max_length=500)

    def details(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"product_id", "variant_id"})


class WishlistNotifyUpdate(BaseModel):
    notify_on_sale: bool


class WishlistItemOut(ORMModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    variant_sku: Optional[str] = None
    variant_name: Optional[str] = None
    price_at_add: Decimal
    notify_on_sale: bool
    product_name: Optional[str] = None
    product_slug: Optional[str] = None
    product_image: Optional[str] = None
    created_at: datetime


# ============================================================================
# Back-in-stock
# ============================================================================

class BackInStockSubscribe(BaseModel):
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    product_name: Optional[str] = Field(default=None, max_length=255)
    product_slug: Optional[str] = Field(default=None, max_length=255)
    product_image: Optional[str] = Field(default=None, max_length=500)
    variant_sku: Optional[str] = Field(default=None, max_length=100)
    variant_name: Optional[str] = Field(default=None, max_length=255)

    def details(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"product_id", "variant_id"})


class SubscriptionOut(ORMModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    product_name: Optional[str] = None
    product_slug: Optional[str] = None
    product_image: Optional[str] = None
    variant_sku: Optional[str] = None
    variant_name: Optional[str] = None
    is_notified: bool
    notified_at: Optional[datetime] = None
    created_at: datetime


class MarkNotifiedIn(BaseModel):
    subscription_ids: List[uuid.UUID] = Field(min_length=1)


class StatsOut(BaseModel):
    total_subscriptions: int
    pending_notifications: int
    sent_notifications: int
    unique_products: int
    unique_customers: int
