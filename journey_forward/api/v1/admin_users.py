"""Admin user management."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.admin.auth import verify_password
from journey_forward.admin.dependencies import get_current_admin
from journey_forward.config import settings
from journey_forward.database import get_db
from journey_forward.errors import ValidationError
from journey_forward.models.admin import Admin
from journey_forward.repositories.admin import AdminRepository
from journey_forward.schemas.admin import AdminCreate, AdminOut, AdminUpdate, PasswordChange

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin/users", tags=["admin-users"])


def _repo(db: AsyncSession) -> AdminRepository:
    return AdminRepository(db, bcrypt_rounds=settings.bcrypt_rounds)


@router.get("", response_model=list[AdminOut])
async def list_admins(
    _: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminOut]:
    return [AdminOut.model_validate(a) for a in await _repo(db).list()]


@router.post("", response_model=AdminOut, status_code=201)
async def create_admin(
    data: AdminCreate,
    current: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminOut:
    admin = await _repo(db).create(data)
    logger.info("admin_user_added", admin_id=admin.id, created_by=current.id)
    return AdminOut.model_validate(admin)


@router.post("/change-password")
async def change_password(
    data: PasswordChange,
    current: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change the logged-in admin's own password."""
    if not verify_password(data.current_password, current.password_hash):
        raise ValidationError("Current password is incorrect.")

    await _repo(db).set_password(current, data.new_password)
    return {"success": True}


@router.patch("/{admin_id}", response_model=AdminOut)
async def update_admin(
    admin_id: int,
    data: AdminUpdate,
    _: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> AdminOut:
    return AdminOut.model_validate(await _repo(db).update(admin_id, data))


@router.delete("/{admin_id}")
async def delete_admin(
    admin_id: int,
    current: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await _repo(db).delete(admin_id, current_admin_id=current.id)
    return {"success": True}
