"""Pydantic transfer models for the DSCommerce API.

Entities never leave the service layer; routes return these projections.
JSON field names are camelCase (productId, subTotal, imgUrl) while Python
attribute names stay snake_case.
"""

from datetime import date, datetime, timezone
from math import ceil
from typing import Generic, List, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from dscommerce.db.models import (
    INT_COLUMN_MAX,
    INT_COLUMN_MIN,
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    Product,
    User,
)

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase JSON aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored instants are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================================
# Catalog
# ============================================================================


class CategoryDTO(CamelModel):
    """Category reference, also used inside product payloads."""

    id: int = Field(..., ge=INT_COLUMN_MIN, le=INT_COLUMN_MAX)
    name: Optional[str] = None

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryDTO":
        return cls(id=category.id, name=category.name)


class ProductDTO(CamelModel):
    """Full product representation used for reads and admin writes."""

    id: Optional[int] = None
    name: str = Field(..., min_length=3, max_length=80, description="Product name")
    description: str = Field(..., min_length=10, description="Product description")
    price: float = Field(..., gt=0, description="Unit price")
    img_url: Optional[str] = Field(default=None, description="Image URL")
    categories: List[CategoryDTO] = Field(
        ...,
        min_length=1,
        description="At least one category",
    )

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def from_entity(cls, product: Product) -> "ProductDTO":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            img_url=product.img_url,
            categories=[CategoryDTO.from_entity(c) for c in product.categories],
        )


class ProductMinDTO(CamelModel):
    """Compact product projection used in listings."""

    id: int
    name: str
    price: float
    img_url: Optional[str] = None

    @classmethod
    def from_entity(cls, product: Product) -> "ProductMinDTO":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            img_url=product.img_url,
        )


# ============================================================================
# Users
# ============================================================================


class ClientDTO(CamelModel):
    """Client as embedded in an order: no email, no roles."""

    id: int
    name: str

    @classmethod
    def from_entity(cls, user: User) -> "ClientDTO":
        return cls(id=user.id, name=user.name)


class UserDTO(CamelModel):
    """The authenticated user's own profile."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    roles: List[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, user: User) -> "UserDTO":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            birth_date=user.birth_date,
            roles=sorted(user.authorities),
        )


# ============================================================================
# Orders
# ============================================================================


class PaymentDTO(CamelModel):
    moment: datetime

    @field_validator("moment")
    @classmethod
    def moment_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentDTO":
        return cls(moment=payment.moment)


class OrderItemDTO(CamelModel):
    """A line item with its computed subtotal."""

    product_id: int
    name: str
    price: float
    quantity: int

    @computed_field(alias="subTotal")
    @property
    def sub_total(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemDTO":
        return cls(
            product_id=item.product_id if item.product_id is not None else item.product.id,
            name=item.product.name,
            price=item.price,
            quantity=item.quantity,
        )


class OrderDTO(CamelModel):
    """Order projection with client, payment, items and computed total.

    The total is never stored: it is the sum of price * quantity over the
    items, computed whenever the projection is serialized.
    """

    id: int
    moment: datetime
    status: OrderStatus
    client: ClientDTO
    payment: Optional[PaymentDTO] = None
    items: List[OrderItemDTO] = Field(default_factory=list)

    @field_validator("moment")
    @classmethod
    def moment_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @computed_field
    @property
    def total(self) -> float:
        return sum(item.sub_total for item in self.items)

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDTO":
        return cls(
            id=order.id,
            moment=order.moment,
            status=order.status,
            client=ClientDTO.from_entity(order.client),
            payment=PaymentDTO.from_entity(order.payment) if order.payment else None,
            items=[OrderItemDTO.from_entity(item) for item in order.items],
        )


class OrderItemInsert(CamelModel):
    """One requested product line. Extra fields (name, price) are ignored."""

    product_id: int = Field(
        ..., ge=INT_COLUMN_MIN, le=INT_COLUMN_MAX, description="Product to order"
    )
    quantity: int = Field(..., gt=0, le=INT_COLUMN_MAX, description="Units to order")


class OrderInsert(CamelModel):
    """Body of POST /orders. Accepts the OrderDTO shape; only items are read."""

    items: List[OrderItemInsert] = Field(
        ...,
        min_length=1,
        description="Ordered items (at least one)",
    )


# ============================================================================
# Auth
# ============================================================================


class TokenResponse(BaseModel):
    """OAuth2 password grant response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


# ============================================================================
# Pagination
# ============================================================================


class PageRequest(BaseModel):
    """Zero-based page request with an optional sort."""

    page: int = Field(default=0, ge=0, le=INT_COLUMN_MAX)
    size: int = Field(default=12, ge=1)
    sort_field: Optional[str] = None
    sort_desc: bool = False

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(CamelModel, Generic[T]):
    """One page of results plus paging metadata."""

    content: List[T]
    total_elements: int
    number: int
    size: int

    @computed_field(alias="totalPages")
    @property
    def total_pages(self) -> int:
        return ceil(self.total_elements / self.size) if self.size else 0

    @computed_field(alias="numberOfElements")
    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @computed_field
    @property
    def first(self) -> bool:
        return self.number == 0

    @computed_field
    @property
    def last(self) -> bool:
        return self.number + 1 >= self.total_pages

    @computed_field
    @property
    def empty(self) -> bool:
        return not self.content
