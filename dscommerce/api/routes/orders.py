"""Order API routes."""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.models import OrderDTO, OrderInsert
from dscommerce.api.services.order import OrderService, get_order_service
from dscommerce.api.shared.auth import Principal, get_current_principal, require_roles
from dscommerce.db.models import INT_COLUMN_MAX, INT_COLUMN_MIN, RoleName
from dscommerce.db.session import get_db

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: int = Path(..., ge=INT_COLUMN_MIN, le=INT_COLUMN_MAX),
    principal: Principal = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service),
) -> OrderDTO:
    """Get one order.

    Clients may read only their own orders; admins may read any order.
    """
    return await service.find_by_id(order_id, principal)


@router.post("", response_model=OrderDTO, status_code=status.HTTP_201_CREATED)
async def create_order(
    response: Response,
    payload: OrderInsert,
    principal: Principal = Depends(require_roles(RoleName.CLIENT)),
    service: OrderService = Depends(get_order_service),
    db: AsyncSession = Depends(get_db),
) -> OrderDTO:
    """Place an order for the authenticated client.

    Only item product ids and quantities are read from the body. Prices are
    taken from the catalog at the time of the order.
    """
    order = await service.insert(payload, principal)
    await db.commit()
    response.headers["Location"] = f"/orders/{order.id}"
    return order
