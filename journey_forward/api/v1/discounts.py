"""Admin discount code management."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.admin.dependencies import get_current_admin
from journey_forward.database import get_db
from journey_forward.repositories.discount import DiscountRepository
from journey_forward.schemas.discount import DiscountCreate, DiscountOut, DiscountUpdate

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/v1/admin/discounts",
    tags=["admin-discounts"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=list[DiscountOut])
async def list_discounts(db: AsyncSession = Depends(get_db)) -> list[DiscountOut]:
    return [DiscountOut.model_validate(d) for d in await DiscountRepository(db).list()]


@router.post("", response_model=DiscountOut, status_code=201)
async def create_discount(
    data: DiscountCreate,
    db: AsyncSession = Depends(get_db),
) -> DiscountOut:
    return DiscountOut.model_validate(await DiscountRepository(db).create(data))


@router.get("/{discount_id}", response_model=DiscountOut)
async def get_discount(discount_id: int, db: AsyncSession = Depends(get_db)) -> DiscountOut:
    return DiscountOut.model_validate(await DiscountRepository(db).get(discount_id))


@router.patch("/{discount_id}", response_model=DiscountOut)
async def update_discount(
    discount_id: int,
    data: DiscountUpdate,
    db: AsyncSession = Depends(get_db),
) -> DiscountOut:
    return DiscountOut.model_validate(await DiscountRepository(db).update(discount_id, data))


@router.post("/{discount_id}/toggle", response_model=DiscountOut)
async def toggle_discount(discount_id: int, db: AsyncSession = Depends(get_db)) -> DiscountOut:
    """Flip ``is_active``."""
    repo = DiscountRepository(db)
    discount = await repo.get(discount_id)
    return DiscountOut.model_validate(await repo.set_active(discount_id, not discount.is_active))


@router.delete("/{discount_id}")
async def delete_discount(discount_id: int, db: AsyncSession = Depends(get_db)):
    await DiscountRepository(db).delete(discount_id)
    return {"success": True}
