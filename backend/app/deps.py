"""路由依赖：当前用户与角色校验"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import AuthenticationRequired
from app.models.user import User
from app.services import policy
from app.services.auth import AuthService


def get_settings(request: Request):
    return request.app.state.settings


async def get_current_user_optional(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    """没有令牌或令牌无效时视为匿名，不报错"""
    settings = get_settings(request)
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return await AuthService(db).user_from_token(token, settings.JWT_SECRET)


async def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    policy.require_admin(user.role)
    return user


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
