"""Repository for orders and their owned items and payment."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.db.models import Order


class OrderRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, order_id: int) -> Optional[Order]:
        """Load an order with client, items (and their products) and payment."""
        return await self.db.get(Order, order_id)

    async def save(self, order: Order) -> Order:
        """Persist a new order together with its items.

        The order id is assigned on flush. Relationships are reloaded so the
        returned entity can be projected without further lazy loads.
        """
        self.db.add(order)
        await self.db.flush()
        await self.db.refresh(order, attribute_names=["client", "items", "payment"])
        return order
