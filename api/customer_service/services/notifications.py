# customer_service/services/notifications.py
"""
Client for the notification service (back-in-stock e-mails).
"""
from __future__ import annotations
import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from customer_service.errors import DeliveryError

logger = logging.getLogger(__name__)

BACK_IN_STOCK_PATH = "/api/v1/notifications/back-in-stock"


class BackInStockNotification(BaseModel):
    """Payload sent for one subscription; serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subscription_id: str
    customer_id: str
    customer_email: str = ""
    customer_name: str = ""
    product_id: str
    product_name: str = ""
    product_slug: str = ""
    product_image: str = ""
    variant_id: Optional[str] = None
    variant_sku: Optional[str] = None
    variant_name: Optional[str] = None
    stock_quantity: int = 0

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class NotificationSender(Protocol):
    async def send_back_in_stock(self, notification: BackInStockNotification) -> None:
        """Deliver one notification or raise DeliveryError."""
        ...


class HttpNotificationClient:
    """POSTs notifications to the notification service over HTTP."""

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def send_back_in_stock(self, notification: BackInStockNotification) -> None:
        url = f"{self.base_url}{BACK_IN_STOCK_PATH}"
        try:
            resp = await self._client.post(url, json=notification.to_payload())
        except httpx.HTTPError as e:
            raise DeliveryError(f"Notification service unreachable: {e}") from e

        if resp.status_code >= 300:
            raise DeliveryError(
                f"Notification service returned {resp.status_code} for subscription {notification.subscription_id}"
            )
        logger.info(
            f"Back-in-stock notification sent: subscription={notification.subscription_id} "
            f"product={notification.product_name!r} qty={notification.stock_quantity}"
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
