"""Data access repositories.

Each repository wraps an AsyncSession and owns the queries for one
aggregate. Repositories flush but never commit; the request-scoped session
in dscommerce.db.session decides the transaction outcome.
"""

from .category import CategoryRepository
from .order import OrderRepository
from .product import ProductRepository, SORTABLE_FIELDS
from .user import UserRepository

__all__ = [
    "CategoryRepository",
    "OrderRepository",
    "ProductRepository",
    "UserRepository",
    "SORTABLE_FIELDS",
]
