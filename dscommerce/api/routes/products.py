"""Product catalog API routes.

Reads are public. Creating, updating and deleting products requires
ROLE_ADMIN.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import Page, PageRequest, ProductDTO, ProductMinDTO
from dscommerce.api.services.product import ProductService, get_product_service
from dscommerce.api.shared.auth import Principal, require_roles
from dscommerce.api.shared.helpers.errors import ErrorCode, ValidationError
from dscommerce.config import get_config
from dscommerce.db.models import INT_COLUMN_MAX, INT_COLUMN_MIN, RoleName
from dscommerce.db.repositories import SORTABLE_FIELDS
from dscommerce.db.session import get_db

router = APIRouter(prefix="/products", tags=["products"])

require_admin = require_roles(RoleName.ADMIN)

ProductId = Annotated[int, Path(ge=INT_COLUMN_MIN, le=INT_COLUMN_MAX)]


def parse_sort(sort: Optional[str]) -> tuple[Optional[str], bool]:
    """Parse a "field[,asc|desc]" sort parameter.

    Raises:
        ValidationError: Unknown field or direction
    """
    if not sort:
        return None, False

    field_name, _, direction = sort.partition(",")
    field_name = field_name.strip()
    direction = direction.strip().lower() or "asc"

    error = ValidationError(error_code=ErrorCode.VAL_INVALID_FIELD)
    if field_name not in SORTABLE_FIELDS:
        error.add_error("sort", f"Sorting by '{field_name}' is not supported")
    if direction not in ("asc", "desc"):
        error.add_error("sort", f"Unknown sort direction '{direction}'")
    if error.errors:
        raise error
    return field_name, direction == "desc"


def get_page_request(
    page: int = Query(
        default=0, ge=0, le=INT_COLUMN_MAX, description="Zero-based page number"
    ),
    size: Optional[int] = Query(default=None, ge=1, description="Page size"),
    sort: Optional[str] = Query(default=None, description="Sort, e.g. name,asc"),
) -> PageRequest:
    api = get_config().api
    sort_field, sort_desc = parse_sort(sort)
    return PageRequest(
        page=page,
        size=min(size or api.default_page_size, api.max_page_size),
        sort_field=sort_field,
        sort_desc=sort_desc,
    )


@router.get("/{product_id}", response_model=ProductDTO)
async def get_product(
    product_id: ProductId,
    service: ProductService = Depends(get_product_service),
) -> ProductDTO:
    return await service.find_by_id(product_id)


@router.get("", response_model=Page[ProductMinDTO])
async def list_products(
    name: str = Query(default="", description="Case-insensitive name fragment"),
    page_request: PageRequest = Depends(get_page_request),
    service: ProductService = Depends(get_product_service),
) -> Page[ProductMinDTO]:
    """Search the catalog by product name, one page at a time."""
    return await service.find_all(name, page_request)


@router.post("", response_model=ProductDTO, status_code=status.HTTP_201_CREATED)
async def create_product(
    response: Response,
    payload: ProductDTO,
    principal: Principal = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
    db: AsyncSession = Depends(get_db),
) -> ProductDTO:
    product = await service.insert(payload)
    await db.commit()
    response.headers["Location"] = f"/products/{product.id}"
    return product


@router.put("/{product_id}", response_model=ProductDTO)
async def update_product(
    product_id: ProductId,
    payload: ProductDTO,
    principal: Principal = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
    db: AsyncSession = Depends(get_db),
) -> ProductDTO:
    product = await service.update(product_id, payload)
    await db.commit()
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: ProductId,
    principal: Principal = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a product. Products referenced by orders cannot be deleted (409)."""
    await service.delete(product_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
