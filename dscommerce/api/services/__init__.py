"""Business services for the DSCommerce API.

Services receive repositories (and, for orders, the authenticated principal)
explicitly, so they can be exercised without the web layer.
"""

from .auth import is_self_or_admin, validate_self_or_admin
from .category import CategoryService, get_category_service
from .order import OrderService, get_order_service
from .product import ProductService, get_product_service
from .user import UserService, get_user_service

__all__ = [
    "is_self_or_admin",
    "validate_self_or_admin",
    "CategoryService",
    "OrderService",
    "ProductService",
    "UserService",
    "get_category_service",
    "get_order_service",
    "get_product_service",
    "get_user_service",
]
