from __future__ import annotations

import pytest

from customer_service.errors import ValidationError
from customer_service.value_objects import CustomerStatus, Email, PersonName, Phone


def test_email_is_normalized():
    email = Email("  Jane.Doe@Example.COM ")
    assert email.value == "jane.doe@example.com"
    assert email.domain == "example.com"
    assert str(email) == "jane.doe@example.com"


@pytest.mark.parametrize("raw", ["", "   ", "jane", "jane@", "jane@example", "@example.com"])
def test_email_rejects_invalid(raw):
    with pytest.raises(ValidationError):
        Email(raw)


@pytest.mark.parametrize("raw", ["+421 905 123 456", "(02) 1234-5678", "+1.555.010.0100", "0905123456"])
def test_phone_accepts_common_formats(raw):
    assert Phone(raw).value == raw


def test_phone_digits():
    assert Phone(" +1 555-010-0100 ").digits == "15550100100"


@pytest.mark.parametrize("raw", ["", "call me", "+1 555 abc"])
def test_phone_rejects_invalid(raw):
    with pytest.raises(ValidationError):
        Phone(raw)


def test_person_name():
    name = PersonName("  Jane ", " Doe ")
    assert (name.first, name.last) == ("Jane", "Doe")
    assert name.full == "Jane Doe"
    assert PersonName("Cher").full == "Cher"
    with pytest.raises(ValidationError):
        PersonName("  ")
    with pytest.raises(ValidationError):
        PersonName("x" * 101)


def test_customer_status():
    assert CustomerStatus.parse(" Active ") is CustomerStatus.active
    assert CustomerStatus.active.can_order
    assert not CustomerStatus.blocked.can_order
    with pytest.raises(ValidationError):
        CustomerStatus.parse("deleted")
