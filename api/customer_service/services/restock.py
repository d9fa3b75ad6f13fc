# customer_service/services/restock.py
"""
Restock fan-out: one "product restocked" event in, back-in-stock
notifications out.

Flow per event:
    received -> subscriptions resolved -> notifications attempted
             -> notified subset committed

Delivery failures are isolated per subscription. Only subscriptions whose
notification went out are marked notified, in one batch at the end. If that
batch fails the customers already got their message but stay pending, so a
later restock may notify them again; nobody pending is ever dropped.
"""
from __future__ import annotations
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.database import Database
from customer_service.db_models import BackInStockSubscription
from customer_service.errors import DeliveryError, StorageError
from customer_service.services.back_in_stock import BackInStockRegistry
from customer_service.services.notifications import BackInStockNotification, NotificationSender

logger = logging.getLogger(__name__)


class RestockEvent(BaseModel):
    """Payload of inventory.product.restocked (snake_case or camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: uuid.UUID = Field(validation_alias=AliasChoices("product_id", "productId"))
    variant_id: Optional[uuid.UUID] = Field(
        default=None, validation_alias=AliasChoices("variant_id", "variantId")
    )
    warehouse_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("warehouse_id", "warehouseId")
    )
    quantity: float = 0
    product_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("product_name", "productName")
    )
    product_slug: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("product_slug", "productSlug")
    )

    @field_validator("variant_id", mode="before")
    @classmethod
    def _blank_variant(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@dataclass
class RestockOutcome:
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    matched: int = 0
    notified: List[uuid.UUID] = field(default_factory=list)
    failed: List[uuid.UUID] = field(default_factory=list)
    marked: int = 0
    mark_failed: bool = False


def build_notification(sub: BackInStockSubscription, event: RestockEvent) -> BackInStockNotification:
    notification = BackInStockNotification(
        subscription_id=str(sub.id),
        customer_id=str(sub.customer_id),
        product_id=str(sub.product_id),
        product_name=sub.product_name or event.product_name or "",
        product_slug=sub.product_slug or event.product_slug or "",
        product_image=sub.product_image or "",
        variant_id=str(sub.variant_id) if sub.variant_id is not None else None,
        variant_sku=sub.variant_sku,
        variant_name=sub.variant_name,
        stock_quantity=int(event.quantity),
    )
    if sub.customer is not None:
        notification.customer_email = sub.customer.email
        notification.customer_name = sub.customer.full_name
    return notification


class RestockNotifier:
    """Consumes restock events and notifies pending back-in-stock subscribers."""

    def __init__(
        self,
        database: Database,
        sender: NotificationSender,
        timeout: float = 30.0,
        registry_factory: Callable[[AsyncSession], BackInStockRegistry] = BackInStockRegistry,
    ):
        self.database = database
        self.sender = sender
        self.timeout = timeout
        self.registry_factory = registry_factory

    async def handle_message(self, data: bytes) -> Optional[RestockOutcome]:
        """Entry point for the event bus. Malformed payloads are logged and dropped."""
        try:
            event = RestockEvent.model_validate_json(data)
        except PydanticValidationError as e:
            logger.error(f"Failed to parse restocked event: {e}")
            return None
        return await self.handle(event)

    async def handle(self, event: RestockEvent) -> Optional[RestockOutcome]:
        logger.info(
            f"Processing product restocked event: product_id={event.product_id} "
            f"variant_id={event.variant_id} quantity={event.quantity}"
        )
        try:
            return await asyncio.wait_for(self._process(event), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Restock processing for product {event.product_id} timed out after {self.timeout}s")
        except StorageError as e:
            logger.error(f"Failed to get subscriptions for product {event.product_id}: {e}")
        return None

    async def _process(self, event: RestockEvent) -> RestockOutcome:
        outcome = RestockOutcome(product_id=event.product_id, variant_id=event.variant_id)

        async with self.database.session() as session:
            registry = self.registry_factory(session)
            subscriptions = await registry.pending_for_product(event.product_id, event.variant_id)
            outcome.matched = len(subscriptions)

            if not subscriptions:
                logger.debug(f"No pending subscriptions for restocked product {event.product_id}")
                return outcome

            logger.info(f"Found {len(subscriptions)} subscriptions to notify for product {event.product_id}")

            for sub in subscriptions:
                try:
                    await self.sender.send_back_in_stock(build_notification(sub, event))
                except DeliveryError as e:
                    logger.error(f"Failed to send notification for subscription {sub.id}: {e}")
                    outcome.failed.append(sub.id)
                    continue
                except Exception:
                    logger.exception(f"Unexpected error notifying subscription {sub.id}")
                    outcome.failed.append(sub.id)
                    continue
                outcome.notified.append(sub.id)

            if outcome.notified:
                try:
                    outcome.marked = await registry.mark_notified(outcome.notified)
                except StorageError as e:
                    outcome.mark_failed = True
                    logger.error(
                        f"Failed to mark {len(outcome.notified)} subscriptions as notified "
                        f"(they stay pending): {e}"
                    )
                else:
                    logger.info(f"Marked {outcome.marked} subscriptions as notified")

        return outcome
