"""Product catalog model."""

from typing import List

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, generate_repr
from .category import Category

product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Product(Base):
    """A product offered in the catalog.

    Order items reference products without owning them, so a product that
    appears in any order cannot be deleted (the order_items foreign key has
    no ON DELETE action).
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    img_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    categories: Mapped[List[Category]] = relationship(
        secondary=product_categories,
        lazy="selectin",
        order_by=Category.id,
    )

    def __repr__(self) -> str:
        return generate_repr(self, "id", "name")
