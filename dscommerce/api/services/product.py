"""Product catalog service."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import Page, PageRequest, ProductDTO, ProductMinDTO
from dscommerce.api.shared.helpers.errors import DatabaseIntegrityError, NotFoundError
from dscommerce.db.models import Product
from dscommerce.db.repositories import CategoryRepository, ProductRepository
from dscommerce.db.session import get_db
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)


class ProductService:
    """Lookup, search and admin maintenance of catalog products."""

    def __init__(
        self,
        db: AsyncSession,
        products: ProductRepository,
        categories: CategoryRepository,
    ):
        self.db = db
        self.products = products
        self.categories = categories

    async def find_by_id(self, product_id: int) -> ProductDTO:
        product = await self.products.get_or_fail(product_id)
        return ProductDTO.from_entity(product)

    async def find_all(self, name: str, page_request: PageRequest) -> Page[ProductMinDTO]:
        """Search products whose name contains the fragment, ignoring case."""
        products, total = await self.products.search_by_name(
            name=name,
            offset=page_request.offset,
            limit=page_request.size,
            sort_field=page_request.sort_field,
            sort_desc=page_request.sort_desc,
        )
        return Page[ProductMinDTO](
            content=[ProductMinDTO.from_entity(p) for p in products],
            total_elements=total,
            number=page_request.page,
            size=page_request.size,
        )

    async def insert(self, dto: ProductDTO) -> ProductDTO:
        product = Product()
        await self._copy_dto_to_entity(dto, product)
        product = await self.products.save(product)
        logger.info("product_created", product_id=product.id)
        return ProductDTO.from_entity(product)

    async def update(self, product_id: int, dto: ProductDTO) -> ProductDTO:
        product = await self.products.get_or_fail(product_id)
        await self._copy_dto_to_entity(dto, product)
        product = await self.products.save(product)
        logger.info("product_updated", product_id=product.id)
        return ProductDTO.from_entity(product)

    async def delete(self, product_id: int) -> None:
        """Delete a product that no order references.

        Raises:
            NotFoundError: No product with this id
            DatabaseIntegrityError: Order items still reference the product
        """
        if not await self.products.exists(product_id):
            raise NotFoundError.for_entity("Product", product_id)

        try:
            async with self.db.begin_nested():
                await self.products.delete(product_id)
        except IntegrityError as e:
            logger.info("product_delete_rejected", product_id=product_id)
            raise DatabaseIntegrityError(
                f"Product {product_id} is referenced by existing orders"
            ) from e
        logger.info("product_deleted", product_id=product_id)

    async def _copy_dto_to_entity(self, dto: ProductDTO, product: Product) -> None:
        product.name = dto.name
        product.description = dto.description
        product.price = dto.price
        product.img_url = dto.img_url
        # Repeated category ids collapse to one link
        category_ids = list(dict.fromkeys(c.id for c in dto.categories))
        product.categories = await self.categories.get_many(category_ids)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    """FastAPI dependency that creates a product service."""
    return ProductService(db, ProductRepository(db), CategoryRepository(db))
