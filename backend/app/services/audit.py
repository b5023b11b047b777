"""操作日志写入与查询"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.system_log import SystemLog


def record(
    session: AsyncSession,
    user_id: Optional[int],
    action: str,
    target: Optional[str] = None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
) -> SystemLog:
    """在当前会话中追加一条日志，随业务数据一起提交"""
    log = SystemLog(
        user_id=user_id,
        action=action,
        target=target,
        details=details,
        ip_address=ip_address,
    )
    session.add(log)
    return log


async def list_logs(session: AsyncSession, limit: int = 100) -> list[SystemLog]:
    result = await session.execute(
        select(SystemLog).order_by(SystemLog.created_at.desc(), SystemLog.id.desc()).limit(limit)
    )
    return list(result.scalars().all())
