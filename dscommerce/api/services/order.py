"""Order workflow: reading an order and placing a new one."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import OrderDTO, OrderInsert
from dscommerce.api.services.auth import validate_self_or_admin
from dscommerce.api.shared.auth import Principal
from dscommerce.api.shared.helpers.errors import (
    AuthenticationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from dscommerce.db.models import INT_COLUMN_MAX, Order, OrderItem, OrderStatus
from dscommerce.db.repositories import (
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from dscommerce.db.session import get_db
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """Reads and creates orders on behalf of an authenticated principal.

    Role requirements are enforced by the routes. This service only enforces
    ownership on reads: a client sees its own orders, an admin sees all.
    """

    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        users: UserRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.orders = orders
        self.products = products
        self.users = users
        self.clock = clock or _utcnow

    async def find_by_id(self, order_id: int, principal: Principal) -> OrderDTO:
        """Return an order the principal is allowed to see.

        Raises:
            NotFoundError: No order with this id
            AuthorizationError: The order belongs to another client and the
                principal is not an admin
        """
        order = await self.orders.get(order_id)
        if order is None:
            raise NotFoundError.for_entity("Order", order_id)

        validate_self_or_admin(principal, order.client.id)
        return OrderDTO.from_entity(order)

    async def insert(self, payload: OrderInsert, principal: Principal) -> OrderDTO:
        """Place a new order for the principal.

        The order starts in WAITING_PAYMENT with the current UTC moment. Each
        item snapshots the product's current price. Requesting the same product
        more than once yields a single item with the summed quantity.

        Raises:
            AuthenticationError: The principal's user row no longer exists
            NotFoundError: A requested product does not exist
            ValidationError: Merged quantities for one product overflow
        """
        user = await self.users.get(principal.id)
        if user is None:
            raise AuthenticationError(error_code=ErrorCode.AUTH_USER_NOT_FOUND)

        order = Order(moment=self.clock(), status=OrderStatus.WAITING_PAYMENT, client=user)

        items: Dict[int, OrderItem] = {}
        for requested in payload.items:
            existing = items.get(requested.product_id)
            if existing is not None:
                existing.quantity += requested.quantity
                if existing.quantity > INT_COLUMN_MAX:
                    error = ValidationError(error_code=ErrorCode.VAL_INVALID_FIELD)
                    error.add_error(
                        "items",
                        f"Total quantity for product {requested.product_id} is too large",
                    )
                    raise error
                continue

            product = await self.products.get_or_fail(requested.product_id)
            item = OrderItem(
                product=product,
                quantity=requested.quantity,
                price=product.price,
            )
            items[requested.product_id] = item
            order.items.append(item)

        order = await self.orders.save(order)
        logger.info(
            "order_created",
            order_id=order.id,
            client_id=user.id,
            items=len(order.items),
            total=order.total,
        )
        return OrderDTO.from_entity(order)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    """FastAPI dependency that creates an order service."""
    return OrderService(
        orders=OrderRepository(db),
        products=ProductRepository(db),
        users=UserRepository(db),
    )
