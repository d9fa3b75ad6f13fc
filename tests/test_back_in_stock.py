from __future__ import annotations
import asyncio
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import update

from customer_service.db_models import BackInStockSubscription, utcnow
from customer_service.errors import NotFoundError
from customer_service.services.back_in_stock import BackInStockRegistry
from customer_service.services.profile import ProfileService
from customer_service.value_objects import Email, PersonName

PRODUCT = uuid.UUID("44444444-4444-4444-4444-444444444444")
V1 = uuid.UUID("55555555-5555-5555-5555-555555555555")
V2 = uuid.UUID("66666666-6666-6666-6666-666666666666")


async def pending_ids(database, product_id, variant_id=None):
    async with database.session() as s:
        return {sub.id for sub in await BackInStockRegistry(s).pending_for_product(product_id, variant_id)}


async def test_subscribe_is_idempotent(session, owner):
    reg = BackInStockRegistry(session)
    first = await reg.subscribe(owner, PRODUCT, V1, details={"product_name": "Jersey"})
    again = await reg.subscribe(owner, PRODUCT, V1, details={"product_name": "Other"})

    assert again.id == first.id
    assert again.product_name == "Jersey"
    assert again.is_notified is False
    assert len(await reg.list_for_customer(owner)) == 1


async def test_concurrent_subscribes_keep_one_subscription(database, owner):
    async def subscribe():
        async with database.session() as s:
            return await BackInStockRegistry(s).subscribe(owner, PRODUCT, V1)

    subs = await asyncio.gather(*(subscribe() for _ in range(8)))

    assert len({sub.id for sub in subs}) == 1
    assert await pending_ids(database, PRODUCT, V1) == {subs[0].id}


async def test_product_level_and_variant_are_separate_keys(session, owner):
    reg = BackInStockRegistry(session)
    plain = await reg.subscribe(owner, PRODUCT)
    v1 = await reg.subscribe(owner, PRODUCT, V1)

    assert plain.id != v1.id
    assert await reg.is_subscribed(owner, PRODUCT)
    assert await reg.is_subscribed(owner, PRODUCT, V1)
    assert not await reg.is_subscribed(owner, PRODUCT, V2)


async def test_unsubscribe_exact_key(session, owner):
    reg = BackInStockRegistry(session)
    await reg.subscribe(owner, PRODUCT)
    await reg.subscribe(owner, PRODUCT, V1)

    await reg.unsubscribe(owner, PRODUCT)

    assert not await reg.is_subscribed(owner, PRODUCT)
    assert await reg.is_subscribed(owner, PRODUCT, V1)
    with pytest.raises(NotFoundError):
        await reg.unsubscribe(owner, PRODUCT)


async def test_unsubscribe_by_id_checks_owner(session, owner):
    reg = BackInStockRegistry(session)
    sub_id = (await reg.subscribe(owner, PRODUCT)).id

    with pytest.raises(NotFoundError):
        await reg.unsubscribe_by_id(uuid.uuid4(), sub_id)
    await reg.unsubscribe_by_id(owner, sub_id)
    assert await reg.list_for_customer(owner) == []


async def test_pending_for_product_variant_filter(session, database):
    reg = BackInStockRegistry(session)
    a = await reg.subscribe(uuid.uuid4(), PRODUCT, V1)
    b = await reg.subscribe(uuid.uuid4(), PRODUCT, V1)
    c = await reg.subscribe(uuid.uuid4(), PRODUCT, V2)
    d = await reg.subscribe(uuid.uuid4(), PRODUCT)
    await reg.subscribe(uuid.uuid4(), uuid.uuid4())

    assert await pending_ids(database, PRODUCT, V1) == {a.id, b.id}
    assert await pending_ids(database, PRODUCT) == {a.id, b.id, c.id, d.id}


async def test_pending_loads_subscriber_profile(session, database, owner):
    await ProfileService(session).upsert(owner, Email("Jane@Example.com"), PersonName("Jane", "Doe"))
    reg = BackInStockRegistry(session)
    await reg.subscribe(owner, PRODUCT)
    await reg.subscribe(uuid.uuid4(), PRODUCT)

    async with database.session() as s:
        subs = await BackInStockRegistry(s).pending_for_product(PRODUCT)
    by_customer = {sub.customer_id: sub for sub in subs}
    assert by_customer[owner].customer.email == "jane@example.com"
    assert by_customer[owner].customer.full_name == "Jane Doe"
    others = [sub for sub in subs if sub.customer_id != owner]
    assert others[0].customer is None


async def test_mark_notified_is_monotonic(session, database):
    reg = BackInStockRegistry(session)
    a = (await reg.subscribe(uuid.uuid4(), PRODUCT)).id
    b = (await reg.subscribe(uuid.uuid4(), PRODUCT)).id

    assert await reg.mark_notified([a, a]) == 1
    assert await pending_ids(database, PRODUCT) == {b}

    async with database.session() as s:
        first_at = {sub.id: sub for sub in await BackInStockRegistry(s).list_all()}[a].notified_at
    assert await reg.mark_notified([a]) == 0
    assert await reg.mark_notified([]) == 0

    async with database.session() as s:
        rows = {sub.id: sub for sub in await BackInStockRegistry(s).list_all()}
    assert rows[a].is_notified is True
    assert rows[a].notified_at == first_at
    assert rows[b].is_notified is False
    assert rows[b].notified_at is None


async def test_stats(session):
    reg = BackInStockRegistry(session)
    c1, c2 = uuid.uuid4(), uuid.uuid4()
    s1 = await reg.subscribe(c1, PRODUCT, V1)
    await reg.subscribe(c1, PRODUCT, V2)
    await reg.subscribe(c2, uuid.uuid4())
    await reg.mark_notified([s1.id])

    stats = await reg.stats()
    assert stats.to_dict() == {
        "total_subscriptions": 3,
        "pending_notifications": 2,
        "sent_notifications": 1,
        "unique_products": 2,
        "unique_customers": 2,
    }


async def test_list_all_pending_only(session):
    reg = BackInStockRegistry(session)
    s1 = await reg.subscribe(uuid.uuid4(), PRODUCT)
    s2 = await reg.subscribe(uuid.uuid4(), PRODUCT)
    await reg.mark_notified([s1.id])

    assert {s.id for s in await reg.list_all()} == {s1.id, s2.id}
    assert [s.id for s in await reg.list_all(pending_only=True)] == [s2.id]
    assert len(await reg.list_all(limit=1)) == 1


async def test_delete_old_notified(session, database):
    reg = BackInStockRegistry(session)
    old = (await reg.subscribe(uuid.uuid4(), PRODUCT)).id
    recent = (await reg.subscribe(uuid.uuid4(), PRODUCT)).id
    pending = (await reg.subscribe(uuid.uuid4(), PRODUCT)).id
    await reg.mark_notified([old, recent])

    async with database.session() as s:
        await s.execute(
            update(BackInStockSubscription)
            .where(BackInStockSubscription.id == old)
            .values(notified_at=utcnow() - timedelta(days=45))
        )
        await s.commit()

    assert await reg.delete_old_notified(30) == 1

    async with database.session() as s:
        remaining = {sub.id for sub in await BackInStockRegistry(s).list_all()}
    assert remaining == {recent, pending}
