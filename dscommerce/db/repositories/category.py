"""Repository for product categories."""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.shared.helpers.errors import NotFoundError
from dscommerce.db.models import Category


class CategoryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, category_id: int) -> Optional[Category]:
        return await self.db.get(Category, category_id)

    async def get_or_fail(self, category_id: int) -> Category:
        category = await self.get(category_id)
        if category is None:
            raise NotFoundError.for_entity("Category", category_id)
        return category

    async def get_many(self, category_ids: Sequence[int]) -> List[Category]:
        """Resolve category ids in the given order, failing on the first unknown id."""
        return [await self.get_or_fail(category_id) for category_id in category_ids]

    async def list_all(self) -> List[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())
