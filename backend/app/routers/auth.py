from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.deps import get_current_user_optional, get_settings
from app.models.user import User
from app.schemas import (
    LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, SuccessResponse, UserResponse,
)
from app.services.auth import AuthService, create_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """注册普通用户"""
    user = await AuthService(db).register(
        username=data.username,
        password=data.password,
        name=data.name,
        email=data.email,
    )
    return RegisterResponse(user_id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    """登录并写入会话 Cookie"""
    settings = get_settings(request)
    user = await AuthService(db).login(data.username_or_email, data.password)
    token = create_token(user.id, user.username, settings.JWT_SECRET, settings.SESSION_DAYS)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return LoginResponse(user=UserResponse.model_validate(user))


@router.get("/me", response_model=Optional[UserResponse])
async def me(user: Optional[User] = Depends(get_current_user_optional)):
    """当前用户，匿名时返回 null"""
    return user


@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request, response: Response):
    response.delete_cookie(get_settings(request).SESSION_COOKIE_NAME, path="/")
    return SuccessResponse()
