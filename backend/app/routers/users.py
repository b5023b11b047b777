"""用户管理接口（管理员）"""
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.deps import client_ip, require_admin
from app.models.user import User
from app.schemas import PasswordReset, RoleUpdate, SuccessResponse, UserResponse
from app.services.users import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db), admin: User = Depends(require_admin)):
    return await UserService(db, admin).list_users()


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_role(
    user_id: int,
    data: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """修改用户角色，不能修改自己"""
    return await UserService(db, admin, client_ip(request)).update_role(user_id, data.role)


@router.put("/{user_id}/status", response_model=UserResponse)
async def toggle_status(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """暂停或恢复用户的填写权限"""
    return await UserService(db, admin, client_ip(request)).toggle_status(user_id)


@router.put("/{user_id}/password", response_model=SuccessResponse)
async def reset_password(
    user_id: int,
    data: PasswordReset,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    await UserService(db, admin, client_ip(request)).reset_password(user_id, data.new_password)
    return SuccessResponse()
