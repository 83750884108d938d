"""Catalog Service models package."""

from services.catalog_service.models.core import City, Government, Product, User
from services.catalog_service.models.enums import UserType

__all__ = [
    "City",
    "Government",
    "Product",
    "User",
    "UserType",
]
