# customer_service/errors.py
"""
Error taxonomy shared by services, routers and the restock notifier.

ValidationError and NotFoundError are raised before anything is written.
ConflictError and StorageError come out of `database.transaction()` after the
rollback has already happened, so callers may retry safely. DeliveryError is
raised by notification clients and never leaves the restock notifier.
"""
from __future__ import annotations


class CustomerServiceError(Exception):
    """Base class for errors raised by the customer service."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CustomerServiceError):
    status_code = 400


class NotFoundError(CustomerServiceError):
    status_code = 404


class ConflictError(CustomerServiceError):
    """A uniqueness or integrity constraint fired."""

    status_code = 409


class StorageError(CustomerServiceError):
    status_code = 500


class DeliveryError(CustomerServiceError):
    """A single notification could not be delivered."""

    status_code = 502
