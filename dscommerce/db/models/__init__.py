"""SQLAlchemy models for DSCommerce.

- User / Role: authenticated principals and their authorities
- Category / Product: the catalog
- Order / OrderItem / Payment: placed orders and their line items

Usage:
    from dscommerce.db.models import Order, OrderStatus

    order = Order(moment=now, status=OrderStatus.WAITING_PAYMENT, client=user)
"""

from .base import INT_COLUMN_MAX, INT_COLUMN_MIN, Base, generate_repr
from .category import Category
from .order import Order, OrderItem, OrderStatus, Payment
from .product import Product, product_categories
from .user import Role, RoleName, User, user_roles

__all__ = [
    "Base",
    "INT_COLUMN_MAX",
    "INT_COLUMN_MIN",
    "generate_repr",
    # Models
    "User",
    "Role",
    "Category",
    "Product",
    "Order",
    "OrderItem",
    "Payment",
    # Association tables
    "user_roles",
    "product_categories",
    # Enums
    "RoleName",
    "OrderStatus",
]
