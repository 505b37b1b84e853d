"""Factory Boy factories for DSCommerce database models.

Usage:
    from tests.factories import OrderFactory, ProductFactory, UserFactory

    # Build without a database
    product = ProductFactory.build(price=90.5)

    # Persist through an async session
    category = await CategoryFactory.async_create(session)
"""

from .order import OrderFactory, OrderItemFactory, PaymentFactory
from .product import CategoryFactory, ProductFactory
from .user import PASSWORD, PASSWORD_HASH, RoleFactory, UserFactory

__all__ = [
    "CategoryFactory",
    "OrderFactory",
    "OrderItemFactory",
    "PASSWORD",
    "PASSWORD_HASH",
    "PaymentFactory",
    "ProductFactory",
    "RoleFactory",
    "UserFactory",
]
