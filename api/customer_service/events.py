# customer_service/events.py
"""
Wiring between the message broker and the restock notifier.

The broker client itself lives outside this service; anything exposing
`async subscribe(subject, callback)` where callback receives the raw message
body can be passed to `RestockSubscriber.start`.
"""
from __future__ import annotations
import logging
from typing import Awaitable, Callable, Protocol

from customer_service.services.restock import RestockNotifier

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], Awaitable[object]]


class EventBus(Protocol):
    async def subscribe(self, subject: str, callback: MessageHandler) -> object:
        ...


class RestockSubscriber:
    """Subscribes the restock notifier to the "product restocked" subject."""

    def __init__(self, notifier: RestockNotifier, subject: str = "inventory.product.restocked"):
        self.notifier = notifier
        self.subject = subject

    async def start(self, bus: EventBus) -> None:
        try:
            await bus.subscribe(self.subject, self.notifier.handle_message)
        except Exception:
            logger.exception(f"Failed to subscribe to {self.subject}")
            raise
        logger.info(f"Subscribed to {self.subject} events")
