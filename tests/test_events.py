from __future__ import annotations
import uuid

import pytest

from customer_service.events import RestockSubscriber
from customer_service.services.restock import RestockNotifier

from conftest import FakeSender


class FakeBus:
    def __init__(self, fail=False):
        self.handlers = {}
        self.fail = fail

    async def subscribe(self, subject, callback):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.handlers[subject] = callback

    async def publish(self, subject, data):
        return await self.handlers[subject](data)


async def test_subscriber_routes_restock_messages(database):
    bus = FakeBus()
    notifier = RestockNotifier(database, FakeSender())
    await RestockSubscriber(notifier, "inventory.product.restocked").start(bus)

    outcome = await bus.publish(
        "inventory.product.restocked", f'{{"product_id": "{uuid.uuid4()}"}}'.encode()
    )
    assert outcome.matched == 0


async def test_subscribe_failure_propagates(database):
    subscriber = RestockSubscriber(RestockNotifier(database, FakeSender()))
    with pytest.raises(ConnectionError):
        await subscriber.start(FakeBus(fail=True))
