from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.deps import require_admin
from app.schemas import SystemLogResponse
from app.services import audit

router = APIRouter(prefix="/api/logs", tags=["logs"])


@router.get("/", response_model=List[SystemLogResponse])
async def list_logs(
    limit: int = Query(default=100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _=Depends(require_admin)
):
    """最近的操作日志"""
    return await audit.list_logs(db, limit)
