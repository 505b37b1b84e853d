"""Repository for catalog products."""

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.shared.helpers.errors import NotFoundError
from dscommerce.db.models import Product

# Sort keys accepted from clients, mapped onto columns
SORTABLE_FIELDS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
}


class ProductRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, product_id: int) -> Optional[Product]:
        return await self.db.get(Product, product_id)

    async def get_or_fail(self, product_id: int) -> Product:
        product = await self.get(product_id)
        if product is None:
            raise NotFoundError.for_entity("Product", product_id)
        return product

    async def exists(self, product_id: int) -> bool:
        result = await self.db.execute(
            select(Product.id).where(Product.id == product_id)
        )
        return result.scalar_one_or_none() is not None

    async def search_by_name(
        self,
        name: str = "",
        offset: int = 0,
        limit: int = 12,
        sort_field: Optional[str] = None,
        sort_desc: bool = False,
    ) -> Tuple[List[Product], int]:
        """Case-insensitive substring search over product names.

        Args:
            name: Fragment to match; empty matches every product
            offset: Rows to skip
            limit: Maximum rows to return
            sort_field: One of SORTABLE_FIELDS (default: id)
            sort_desc: Sort descending

        Returns:
            Tuple of (page of products, total matching count)
        """
        condition = func.upper(Product.name).contains(name.upper(), autoescape=True)

        total = (
            await self.db.execute(select(func.count(Product.id)).where(condition))
        ).scalar_one()

        column = SORTABLE_FIELDS.get(sort_field or "id", Product.id)
        ordering = column.desc() if sort_desc else column.asc()
        query = (
            select(Product)
            .where(condition)
            .order_by(ordering, Product.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def save(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        await self.db.refresh(product, attribute_names=["categories"])
        return product

    async def delete(self, product_id: int) -> None:
        """Delete a product row.

        Raises:
            sqlalchemy.exc.IntegrityError: If an order item still references it
        """
        await self.db.execute(delete(Product).where(Product.id == product_id))
        await self.db.flush()
