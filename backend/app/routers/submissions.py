from datetime import date
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.deps import get_current_user
from app.models.user import User
from app.schemas import MyStats, SubmissionResponse, SubmissionsByDate, SubmitRequest, SubmitResponse, TodayStats
from app.services.submissions import SubmissionService, to_response

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


@router.post("/submit", response_model=SubmitResponse)
async def submit(data: SubmitRequest, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """提交今日选题"""
    submission = await SubmissionService(db).submit(user, data)
    return SubmitResponse(
        submission_id=submission.id,
        topic_count=len(data.topics),
        project_count=len(data.projects),
    )


@router.get("/by-date", response_model=SubmissionsByDate)
async def get_by_date(form_date: date = Query(alias="date"), db: AsyncSession = Depends(get_db), _: User = Depends(get_current_user)):
    """获取某天收集表及全部提交"""
    return await SubmissionService(db).get_by_date(form_date)


@router.get("/today-stats", response_model=TodayStats)
async def today_stats(db: AsyncSession = Depends(get_db)):
    return await SubmissionService(db).today_stats()


@router.get("/my-history", response_model=List[SubmissionResponse])
async def my_history(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    submissions = await SubmissionService(db).my_history(user)
    return [to_response(s) for s in submissions]


@router.get("/my-stats", response_model=MyStats)
async def my_stats(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await SubmissionService(db).my_stats(user)
