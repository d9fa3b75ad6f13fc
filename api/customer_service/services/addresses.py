# customer_service/services/addresses.py
from __future__ import annotations

from customer_service.db_models import Address
from customer_service.services.defaults import ExactlyOneDefault


class AddressService(ExactlyOneDefault[Address]):
    """Shipping/billing addresses; one default address per customer."""

    model = Address
    label = "Address"
