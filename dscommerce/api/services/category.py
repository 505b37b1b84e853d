"""Category listing service."""

from typing import List

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import CategoryDTO
from dscommerce.db.repositories import CategoryRepository
from dscommerce.db.session import get_db


class CategoryService:
    def __init__(self, categories: CategoryRepository):
        self.categories = categories

    async def find_all(self) -> List[CategoryDTO]:
        return [CategoryDTO.from_entity(c) for c in await self.categories.list_all()]


def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(CategoryRepository(db))
