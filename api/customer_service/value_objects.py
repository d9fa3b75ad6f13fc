# customer_service/value_objects.py
"""
Validated value types for customer data.

Each type validates in `__post_init__`, so an invalid instance cannot exist.
Request schemas call them at the HTTP boundary and store the normalized value.
"""
from __future__ import annotations
import enum
import re
from dataclasses import dataclass

from customer_service.errors import ValidationError

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
# +, digits, spaces, dashes, dots, slashes and one leading group in parentheses
_PHONE_RE = re.compile(r"^[\+]?[(]?[0-9]{1,4}[)]?[-\s\./0-9]*$")


class CustomerStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"
    blocked = "blocked"

    @classmethod
    def parse(cls, value: str) -> "CustomerStatus":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid customer status: {value!r}") from None

    @property
    def can_order(self) -> bool:
        return self is CustomerStatus.active


@dataclass(frozen=True)
class Email:
    value: str

    def __post_init__(self):
        normalized = (self.value or "").strip().lower()
        if not normalized:
            raise ValidationError("Email cannot be empty")
        if not _EMAIL_RE.match(normalized):
            raise ValidationError(f"Invalid email format: {self.value!r}")
        object.__setattr__(self, "value", normalized)

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Phone:
    value: str

    def __post_init__(self):
        normalized = (self.value or "").strip()
        if not normalized:
            raise ValidationError("Phone number cannot be empty")
        if not _PHONE_RE.match(normalized):
            raise ValidationError(f"Invalid phone number format: {self.value!r}")
        object.__setattr__(self, "value", normalized)

    @property
    def digits(self) -> str:
        return re.sub(r"\D", "", self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PersonName:
    first: str
    last: str = ""

    def __post_init__(self):
        first = (self.first or "").strip()
        last = (self.last or "").strip()
        if not first:
            raise ValidationError("First name cannot be empty")
        if len(first) > 100 or len(last) > 100:
            raise ValidationError("Name parts must be at most 100 characters")
        object.__setattr__(self, "first", first)
        object.__setattr__(self, "last", last)

    @property
    def full(self) -> str:
        return f"{self.first} {self.last}".strip()

    def __str__(self) -> str:
        return self.full
