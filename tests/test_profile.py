from __future__ import annotations
import uuid

import pytest

from customer_service.errors import ConflictError, NotFoundError, ValidationError
from customer_service.services.profile import ProfileService
from customer_service.value_objects import CustomerStatus, Email, PersonName, Phone


async def test_upsert_then_admin_update_keeps_omitted_parts(session, owner):
    svc = ProfileService(session)
    await svc.upsert(owner, Email("jane@example.com"), PersonName("Jane", "Doe"), phone=Phone("+421 905 123 456"))

    updated = await svc.update_customer(owner, last_name="Smith", status=CustomerStatus.suspended)

    assert (updated.first_name, updated.last_name) == ("Jane", "Smith")
    assert updated.phone == "+421 905 123 456"
    assert updated.status is CustomerStatus.suspended
    assert not updated.status.can_order


async def test_update_rejects_blank_first_name(session, owner):
    svc = ProfileService(session)
    await svc.upsert(owner, Email("jane@example.com"), PersonName("Jane"))

    with pytest.raises(ValidationError):
        await svc.update_customer(owner, first_name="  ")
    assert (await svc.get(owner)).first_name == "Jane"


async def test_create_customer_assigns_id_and_rejects_taken_email(session):
    svc = ProfileService(session)
    created = await svc.create_customer(Email("Bob@Example.com"), PersonName("Bob"))
    created_id = created.id

    assert created.email == "bob@example.com"
    assert created.status is CustomerStatus.active
    with pytest.raises(ConflictError):
        await svc.create_customer(Email("bob@example.com"), PersonName("Robert"))
    assert (await svc.get(created_id)).first_name == "Bob"


async def test_list_customers_pages_and_filters(session):
    svc = ProfileService(session)
    for i in range(5):
        await svc.create_customer(Email(f"user{i}@example.com"), PersonName(f"User{i}"))
    blocked = await svc.create_customer(Email("blocked@example.com"), PersonName("Mallory"))
    await svc.update_customer(blocked.id, status=CustomerStatus.blocked)

    page, total = await svc.list_customers(page=2, limit=4)
    assert total == 6
    assert len(page) == 2

    page, total = await svc.list_customers(status=CustomerStatus.blocked)
    assert [c.id for c in page] == [blocked.id]
    page, total = await svc.list_customers(search="MALL")
    assert total == 1


async def test_delete_and_stats(session):
    svc = ProfileService(session)
    a_id = (await svc.create_customer(Email("a@example.com"), PersonName("A"))).id
    await svc.create_customer(Email("b@example.com"), PersonName("B"), status=CustomerStatus.inactive)

    stats = await svc.stats()
    assert stats.to_dict() == {
        "total_customers": 2,
        "active_customers": 1,
        "new_customers_today": 2,
        "new_customers_month": 2,
    }

    await svc.delete_customer(a_id)
    with pytest.raises(NotFoundError):
        await svc.delete_customer(a_id)
    with pytest.raises(NotFoundError):
        await svc.update_customer(uuid.uuid4(), first_name="X")
    assert (await svc.stats()).total_customers == 1
