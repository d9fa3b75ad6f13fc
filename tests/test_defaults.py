from __future__ import annotations
import asyncio
import uuid
from decimal import Decimal

import pytest

from customer_service.database import transaction
from customer_service.db_models import Address
from customer_service.errors import ConflictError, NotFoundError, ValidationError
from customer_service.services.addresses import AddressService
from customer_service.services.measurements import MeasurementService

from conftest import address_fields


async def default_ids(database, owner, service_cls=AddressService):
    # Fresh session so the check sees committed state only
    async with database.session() as s:
        return [item.id for item in await service_cls(s).list(owner) if item.is_default]


async def test_first_item_is_not_default_unless_requested(session, database, owner):
    await AddressService(session).create(owner, address_fields())
    assert await default_ids(database, owner) == []


async def test_create_with_default_replaces_previous(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields("Home"), make_default=True)
    a2 = await svc.create(owner, address_fields("Work"), make_default=True)

    assert await default_ids(database, owner) == [a2.id]
    async with database.session() as s:
        assert (await AddressService(s).get(owner, a1.id)).is_default is False


async def test_list_orders_default_first(session, owner):
    svc = AddressService(session)
    home = await svc.create(owner, address_fields("Home"), make_default=True)
    await svc.create(owner, address_fields("Work"))
    await svc.create(owner, address_fields("Cabin"))

    items = await svc.list(owner)
    assert items[0].id == home.id
    assert [a.label for a in items[1:]] == ["Cabin", "Work"]


async def test_set_default_switches(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields("Home"), make_default=True)
    a2 = await svc.create(owner, address_fields("Work"))

    result = await svc.set_default(owner, a2.id)
    assert result.id == a2.id and result.is_default is True
    assert await default_ids(database, owner) == [a2.id]

    await svc.set_default(owner, a1.id)
    assert await default_ids(database, owner) == [a1.id]


async def test_set_default_on_current_default_is_stable(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields(), make_default=True)
    await svc.set_default(owner, a1.id)
    assert await default_ids(database, owner) == [a1.id]


async def test_set_default_for_foreign_item_changes_nothing(session, database, owner):
    other = uuid.uuid4()
    svc = AddressService(session)
    mine_id = (await svc.create(owner, address_fields("Home"), make_default=True)).id
    theirs_id = (await svc.create(other, address_fields("Theirs"), make_default=True)).id

    with pytest.raises(NotFoundError):
        await svc.set_default(owner, theirs_id)

    assert await default_ids(database, owner) == [mine_id]
    assert await default_ids(database, other) == [theirs_id]


async def test_set_default_unknown_id(session, database, owner):
    svc = AddressService(session)
    a1_id = (await svc.create(owner, address_fields(), make_default=True)).id
    with pytest.raises(NotFoundError):
        await svc.set_default(owner, uuid.uuid4())
    assert await default_ids(database, owner) == [a1_id]


async def test_update_with_make_default(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields("Home"), make_default=True)
    a2 = await svc.create(owner, address_fields("Work"))

    updated = await svc.update(owner, a2.id, {"city": "Chicago"}, make_default=True)
    assert updated.city == "Chicago"
    assert updated.is_default is True
    assert await default_ids(database, owner) == [a2.id]

    await svc.update(owner, a1.id, {"label": "Old home"})
    assert await default_ids(database, owner) == [a2.id]


async def test_update_can_drop_default_flag(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields(), make_default=True)
    await svc.update(owner, a1.id, {}, make_default=False)
    assert await default_ids(database, owner) == []


async def test_update_ignores_protected_fields(session, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields())
    updated = await svc.update(owner, a1.id, {"user_id": uuid.uuid4(), "label": "Renamed"})
    assert updated.user_id == owner
    assert updated.label == "Renamed"


async def test_unknown_field_is_rejected(session, owner):
    with pytest.raises(ValidationError):
        await AddressService(session).create(owner, address_fields(colour="blue"))


async def test_null_for_required_column_is_rejected(session, owner):
    svc = MeasurementService(session)
    m = await svc.create(owner, {"gender": "men", "name": "Road"})

    with pytest.raises(ValidationError):
        await svc.update(owner, m.id, {"gender": None})
    with pytest.raises(ValidationError):
        await AddressService(session).create(owner, address_fields(city=None))

    updated = await svc.update(owner, m.id, {"name": None})
    assert updated.gender == "men"
    assert updated.name is None


async def test_delete_default_leaves_no_default(session, database, owner):
    svc = AddressService(session)
    a1 = await svc.create(owner, address_fields("Home"), make_default=True)
    await svc.create(owner, address_fields("Work"))

    await svc.delete(owner, a1.id)
    assert await default_ids(database, owner) == []
    assert len(await svc.list(owner)) == 1

    with pytest.raises(NotFoundError):
        await svc.delete(owner, a1.id)


async def test_failed_create_keeps_previous_default(session, database, owner):
    svc = AddressService(session)
    a1_id = (await svc.create(owner, address_fields(), make_default=True)).id

    broken = address_fields("Broken")
    del broken["city"]
    with pytest.raises(ConflictError):
        await svc.create(owner, broken, make_default=True)

    assert await default_ids(database, owner) == [a1_id]
    assert len(await svc.list(owner)) == 1


async def test_partial_unique_index_rejects_second_default(session, database, owner):
    await AddressService(session).create(owner, address_fields(), make_default=True)

    with pytest.raises(ConflictError):
        async with transaction(session):
            session.add(Address(user_id=owner, is_default=True, **address_fields("Sneaky")))
            await session.flush()

    assert len(await default_ids(database, owner)) == 1


async def test_concurrent_set_default_leaves_exactly_one(database, owner):
    async with database.session() as s:
        svc = AddressService(s)
        ids = [(await svc.create(owner, address_fields(f"A{i}"))).id for i in range(5)]

    async def flip(item_id):
        async with database.session() as s:
            await AddressService(s).set_default(owner, item_id)

    await asyncio.gather(*(flip(i) for i in ids))

    async with database.session() as s:
        assert await AddressService(s).count_defaults(owner) == 1


async def test_measurements_have_their_own_default(session, database, owner):
    addr = await AddressService(session).create(owner, address_fields(), make_default=True)
    msvc = MeasurementService(session)
    m1 = await msvc.create(owner, {"gender": "women", "name": "Casual", "waist": Decimal("70.5")}, make_default=True)
    m2 = await msvc.create(owner, {"gender": "women", "name": "Race"}, make_default=True)

    assert await default_ids(database, owner, MeasurementService) == [m2.id]
    assert await default_ids(database, owner) == [addr.id]

    default = await msvc.get_default(owner)
    assert default.id == m2.id
    assert (await msvc.get(owner, m1.id)).waist == Decimal("70.5")


async def test_get_default_none_when_unset(session, owner):
    assert await MeasurementService(session).get_default(owner) is None
