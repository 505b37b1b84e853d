"""Declarative base and shared helpers for DSCommerce models."""

from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names so that integrity errors are easy to trace
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Range an Integer column holds on every supported backend (int4)
INT_COLUMN_MIN = -(2**31)
INT_COLUMN_MAX = 2**31 - 1


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def generate_repr(obj: Any, *attrs: str) -> str:
    """Build a compact repr from selected attributes.

    Example:
        >>> generate_repr(user, "id", "email")
        "<User id=1 email='maria@gmail.com'>"
    """
    parts = " ".join(f"{attr}={getattr(obj, attr, None)!r}" for attr in attrs)
    return f"<{type(obj).__name__} {parts}>"
