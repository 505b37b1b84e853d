"""Unit tests for ProductService and CategoryService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from dscommerce.api.models import CategoryDTO, PageRequest, ProductDTO
from dscommerce.api.services.category import CategoryService
from dscommerce.api.services.product import ProductService
from dscommerce.api.shared.helpers.errors import DatabaseIntegrityError, NotFoundError
from tests.factories import CategoryFactory, ProductFactory


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def books():
    return CategoryFactory.build(id=1, name="Livros")


@pytest.fixture
def lotr(books):
    return ProductFactory.build(
        id=1,
        name="The Lord of the Rings",
        description="An epic fantasy novel in three volumes.",
        price=90.5,
        categories=[books],
    )


@pytest.fixture
def products(lotr):
    async def get_or_fail(product_id):
        if product_id != lotr.id:
            raise NotFoundError.for_entity("Product", product_id)
        return lotr

    async def save(product):
        if product.id is None:
            product.id = 26
        return product

    repo = MagicMock()
    repo.get_or_fail = AsyncMock(side_effect=get_or_fail)
    repo.exists = AsyncMock(side_effect=lambda product_id: product_id == lotr.id)
    repo.search_by_name = AsyncMock(return_value=([lotr], 1))
    repo.save = AsyncMock(side_effect=save)
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def categories(books):
    async def get_many(category_ids):
        if any(cid != books.id for cid in category_ids):
            raise NotFoundError.for_entity("Category", category_ids[-1])
        return [books for _ in category_ids]

    repo = MagicMock()
    repo.get_many = AsyncMock(side_effect=get_many)
    repo.list_all = AsyncMock(return_value=[books])
    return repo


@pytest.fixture
def db():
    return MagicMock()


@pytest.fixture
def service(db, products, categories) -> ProductService:
    return ProductService(db, products, categories)


def product_dto(**overrides) -> ProductDTO:
    data = {
        "name": "Kindle Paperwhite",
        "description": "E-reader with a glare-free display.",
        "price": 499.0,
        "imgUrl": "https://img.example.com/kindle.jpg",
        "categories": [{"id": 1}],
    }
    data.update(overrides)
    return ProductDTO.model_validate(data)


# =============================================================================
# Reads
# =============================================================================


class TestFind:
    async def test_find_by_id(self, service):
        dto = await service.find_by_id(1)

        assert dto.name == "The Lord of the Rings"
        assert dto.categories == [CategoryDTO(id=1, name="Livros")]

    async def test_find_by_id_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.find_by_id(1000)

    async def test_find_all_passes_paging(self, service, products):
        page = await service.find_all("lord", PageRequest(page=2, size=5, sort_field="price"))

        products.search_by_name.assert_awaited_once_with(
            name="lord", offset=10, limit=5, sort_field="price", sort_desc=False
        )
        assert page.total_elements == 1
        assert page.number == 2
        assert page.content[0].name == "The Lord of the Rings"


# =============================================================================
# Writes
# =============================================================================


class TestInsertAndUpdate:
    async def test_insert_assigns_id(self, service, products):
        dto = await service.insert(product_dto())

        products.save.assert_awaited_once()
        assert dto.id == 26
        assert dto.categories[0].name == "Livros"

    async def test_insert_unknown_category(self, service, products):
        with pytest.raises(NotFoundError):
            await service.insert(product_dto(categories=[{"id": 7}]))

        products.save.assert_not_awaited()

    async def test_insert_collapses_repeated_categories(self, service, categories):
        dto = await service.insert(product_dto(categories=[{"id": 1}, {"id": 1}]))

        categories.get_many.assert_awaited_once_with([1])
        assert len(dto.categories) == 1

    async def test_update_copies_fields(self, service, lotr):
        dto = await service.update(1, product_dto(name="The Hobbit", price=45.0))

        assert dto.id == 1
        assert lotr.name == "The Hobbit"
        assert lotr.price == pytest.approx(45.0)

    async def test_update_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.update(1000, product_dto())


class TestDelete:
    async def test_delete_existing(self, service, products, db):
        await service.delete(1)

        db.begin_nested.assert_called_once()
        products.delete.assert_awaited_once_with(1)

    async def test_delete_missing(self, service, products):
        with pytest.raises(NotFoundError):
            await service.delete(1000)

        products.delete.assert_not_awaited()

    async def test_delete_referenced_product(self, service, products):
        products.delete.side_effect = IntegrityError(
            "DELETE FROM products", {}, Exception("FOREIGN KEY constraint failed")
        )

        with pytest.raises(DatabaseIntegrityError) as exc_info:
            await service.delete(1)

        assert exc_info.value.status_code == 409


class TestCategoryService:
    async def test_find_all(self, categories):
        result = await CategoryService(categories).find_all()

        assert result == [CategoryDTO(id=1, name="Livros")]
