"""API route modules."""

from . import auth, categories, orders, products, users

__all__ = ["auth", "categories", "orders", "products", "users"]
