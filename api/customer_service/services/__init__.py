# customer_service/services/__init__.py
"""
Business logic services for the customer service.
"""
from customer_service.services.addresses import AddressService
from customer_service.services.back_in_stock import BackInStockRegistry
from customer_service.services.defaults import ExactlyOneDefault
from customer_service.services.measurements import MeasurementService
from customer_service.services.profile import ProfileService
from customer_service.services.restock import RestockNotifier
from customer_service.services.wishlist import WishlistKey, WishlistService

__all__ = [
    "AddressService",
    "BackInStockRegistry",
    "ExactlyOneDefault",
    "MeasurementService",
    "ProfileService",
    "RestockNotifier",
    "WishlistKey",
    "WishlistService",
]
