"""用户管理（管理员）"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound
from app.models.user import User
from app.services import audit, policy
from app.services.auth import hash_password


class UserService:
    def __init__(self, session: AsyncSession, actor: User, ip_address: Optional[str] = None) -> None:
        self._session = session
        self._actor = actor
        self._ip = ip_address

    async def list_users(self) -> list[User]:
        result = await self._session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return list(result.scalars().all())

    async def _get(self, user_id: int) -> User:
        user = await self._session.get(User, user_id)
        if not user:
            raise NotFound("用户不存在")
        return user

    async def update_role(self, user_id: int, role: str) -> User:
        policy.check_role_change(self._actor.id, user_id)
        user = await self._get(user_id)
        user.role = role
        audit.record(
            self._session, self._actor.id, "UPDATE_USER_ROLE", f"User {user_id}",
            {"newRole": role}, self._ip,
        )
        await self._session.commit()
        return user

    async def toggle_status(self, user_id: int) -> User:
        """在 active 与 suspended 之间切换，暂停的用户不能提交选题"""
        policy.check_status_change(self._actor.id, user_id)
        user = await self._get(user_id)
        user.status = "suspended" if user.status == "active" else "active"
        audit.record(
            self._session, self._actor.id, "TOGGLE_USER_STATUS", f"User {user_id}",
            {"newStatus": user.status}, self._ip,
        )
        await self._session.commit()
        return user

    async def reset_password(self, user_id: int, new_password: str) -> None:
        user = await self._get(user_id)
        user.password = hash_password(new_password)
        audit.record(self._session, self._actor.id, "RESET_USER_PASSWORD", f"User {user_id}", None, self._ip)
        await self._session.commit()
