"""Category API routes."""

from typing import List

from fastapi import APIRouter, Depends

from dscommerce.api.models import CategoryDTO
from dscommerce.api.services.category import CategoryService, get_category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryDTO])
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> List[CategoryDTO]:
    """List all categories ordered by name."""
    return await service.find_all()
