"""User and role models.

Users authenticate with email and password and carry a set of role
authorities (ROLE_CLIENT, ROLE_ADMIN) that drive authorization.
"""

import enum
from datetime import date
from typing import List

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, generate_repr


class RoleName(str, enum.Enum):
    """Role authorities understood by the authorization layer."""

    CLIENT = "ROLE_CLIENT"
    ADMIN = "ROLE_ADMIN"


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """An authority granted to users."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    authority: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return generate_repr(self, "id", "authority")


class User(Base):
    """A registered shop user.

    Attributes:
        id: Integer primary key
        name: Display name
        email: Login identifier (unique)
        phone: Contact phone (optional)
        birth_date: Date of birth (optional)
        password: bcrypt hash, never exposed through the API
        roles: Granted authorities
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    roles: Mapped[List[Role]] = relationship(
        secondary=user_roles,
        lazy="selectin",
    )

    @property
    def authorities(self) -> frozenset[str]:
        return frozenset(role.authority for role in self.roles)

    def __repr__(self) -> str:
        return generate_repr(self, "id", "email")
