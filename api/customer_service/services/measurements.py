# customer_service/services/measurements.py
from __future__ import annotations

from customer_service.db_models import CustomerMeasurement
from customer_service.services.defaults import ExactlyOneDefault


class MeasurementService(ExactlyOneDefault[CustomerMeasurement]):
    """Body measurement sets; one default set per customer, independent of addresses."""

    model = CustomerMeasurement
    label = "Measurement"
