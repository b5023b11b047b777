"""
本地账号认证
密码使用 bcrypt 哈希，会话令牌为 HS256 JWT，载荷 {userId, username}。
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationRequired, Conflict
from app.models.user import User
from app.utils.time_utils import get_shanghai_now

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(10)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_token(user_id: int, username: str, secret: str, days: int = 7, now: Optional[datetime] = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "username": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=days),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str) -> Optional[dict]:
    """令牌无效或过期时返回 None"""
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None
    if not isinstance(payload.get("userId"), int):
        return None
    return {"userId": payload["userId"], "username": payload.get("username")}


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def register(self, username: str, password: str, name: str, email: Optional[str] = None) -> User:
        username = username.strip()
        existing = await self._session.execute(select(User).where(User.username == username))
        if existing.scalar_one_or_none():
            raise Conflict("用户名已被使用")

        if email:
            existing = await self._session.execute(select(User).where(User.email == email))
            if existing.scalar_one_or_none():
                raise Conflict("邮箱已被使用")

        user = User(
            username=username,
            password=hash_password(password),
            name=name.strip(),
            email=email or None,
            role="user",
            status="active",
        )
        self._session.add(user)
        await self._session.commit()
        await self._session.refresh(user)
        logger.info("新用户注册: %s (id=%s)", user.username, user.id)
        return user

    async def login(self, username_or_email: str, password: str) -> User:
        """校验账号密码，成功后更新最后登录时间"""
        result = await self._session.execute(
            select(User).where(or_(User.username == username_or_email, User.email == username_or_email)).limit(1)
        )
        user = result.scalar_one_or_none()
        if not user:
            raise AuthenticationRequired("用户不存在")
        if not verify_password(password, user.password):
            raise AuthenticationRequired("密码错误")

        user.last_signed_in = get_shanghai_now()
        await self._session.commit()
        await self._session.refresh(user)
        return user

    async def user_from_token(self, token: Optional[str], secret: str) -> Optional[User]:
        if not token:
            return None
        payload = decode_token(token, secret)
        if not payload:
            return None
        return await self._session.get(User, payload["userId"])

    async def ensure_admin(self, username: str, password: str, name: str) -> Optional[User]:
        """系统中还没有管理员时创建初始管理员"""
        result = await self._session.execute(select(func.count()).select_from(User).where(User.role == "admin"))
        if result.scalar_one() > 0:
            return None

        result = await self._session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user:
            user.role = "admin"
        else:
            user = User(username=username, password=hash_password(password), name=name, role="admin", status="active")
            self._session.add(user)
        await self._session.commit()
        await self._session.refresh(user)
        logger.info("已创建初始管理员账号: %s", username)
        return user
