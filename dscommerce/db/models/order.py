"""Order, order item and payment models.

An Order exclusively owns its OrderItem rows (cascade all, delete-orphan) and
optionally one Payment. Each OrderItem snapshots the product's unit price at
the time the order was placed.
"""

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, generate_repr
from .product import Product
from .user import User


class OrderStatus(str, enum.Enum):
    """Lifecycle states of an order."""

    WAITING_PAYMENT = "WAITING_PAYMENT"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


class OrderItem(Base):
    """A product line inside an order, keyed by (order_id, product_id)."""

    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id"),
        primary_key=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped[Product] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    @property
    def sub_total(self) -> float:
        return self.price * self.quantity

    def __repr__(self) -> str:
        return generate_repr(self, "order_id", "product_id", "quantity")


class Payment(Base):
    """Payment record sharing its primary key with the paid order."""

    __tablename__ = "payments"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    moment: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="payment")

    def __repr__(self) -> str:
        return generate_repr(self, "order_id", "moment")


class Order(Base):
    """A client's order.

    Attributes:
        id: Integer primary key assigned on insert
        moment: When the order was placed (UTC)
        status: Current lifecycle state
        client: The user who owns the order
        items: Ordered product lines (owned)
        payment: Payment record once the order is paid
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    moment: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"),
        default=OrderStatus.WAITING_PAYMENT,
        nullable=False,
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    client: Mapped[User] = relationship(lazy="selectin")
    items: Mapped[List[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by=OrderItem.product_id,
        lazy="selectin",
    )
    payment: Mapped[Optional[Payment]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    @property
    def total(self) -> float:
        return sum(item.sub_total for item in self.items)

    def __repr__(self) -> str:
        return generate_repr(self, "id", "status")
