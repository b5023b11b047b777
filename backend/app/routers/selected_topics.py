"""入选选题接口"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.deps import client_ip, get_current_user, get_settings, require_admin
from app.models.user import User
from app.schemas import (
    ContributionEntry, ContributionResponse, ExportRequest, ExportResponse, FromSubmissionRequest,
    MergeResult, ProgressCount, SelectedAddRequest, SelectedCreateRequest, SelectedTopicResponse,
    SelectedTopicUpdate, StatusCount, SuccessResponse,
)
from app.services.selected_topics import SelectedTopicService
from app.services.selection import MergeOutcome, SelectionMergeEngine

router = APIRouter(prefix="/api/selected-topics", tags=["selected-topics"])


def _engine(request: Request, db: AsyncSession, user: User) -> SelectionMergeEngine:
    return SelectionMergeEngine(db, user, get_settings(request).MERGE_SCOPE, client_ip(request))


def _result(outcome: MergeOutcome) -> MergeResult:
    return MergeResult(id=outcome.id, merged=outcome.merged, message=outcome.message)


@router.post("/from-submission", response_model=MergeResult)
async def add_from_submission(
    data: FromSubmissionRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """将当天提交的某个选题加入入选池"""
    outcome = await _engine(request, db, admin).add_from_submission(data.submission_topic_id, data.selected_date)
    return _result(outcome)


@router.post("/", response_model=MergeResult)
async def create(
    data: SelectedCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """手动录入入选选题，内容重复时并入提报人"""
    outcome = await _engine(request, db, admin).add(
        content=data.content,
        suggestion=data.suggestion,
        submitters=data.submitters,
        selected_date=data.selected_date,
        source_submission_id=data.source_submission_id,
        leader_comment=data.leader_comment,
        creators=data.creators,
        progress=data.progress,
        status=data.status,
        remark=data.remark,
    )
    return _result(outcome)


@router.post("/add", response_model=MergeResult)
async def add(
    data: SelectedAddRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    outcome = await _engine(request, db, admin).add(
        content=data.content,
        suggestion=data.suggestion,
        submitters=data.submitters,
        selected_date=data.selected_date,
        source_submission_id=data.source_submission_id,
    )
    return _result(outcome)


@router.get("/", response_model=List[SelectedTopicResponse])
async def list_by_month(
    month_key: str = Query(pattern=r"^\d{4}-\d{2}$"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return await SelectedTopicService(db, user).list_by_month(month_key)


@router.get("/all", response_model=List[SelectedTopicResponse])
async def list_all(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await SelectedTopicService(db, user).list_all()


@router.get("/month-keys", response_model=List[str])
async def month_keys(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await SelectedTopicService(db, user).month_keys()


@router.get("/by-source/{submission_topic_id}", response_model=Optional[SelectedTopicResponse])
async def get_by_source(
    submission_topic_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """某个提交选题是否已入选"""
    return await SelectedTopicService(db, user).get_by_source(submission_topic_id)


@router.get("/progress-stats", response_model=List[ProgressCount])
async def progress_stats(
    month_keys: List[str] = Query(default=[]),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return await SelectedTopicService(db, user).progress_stats(month_keys)


@router.get("/status-stats", response_model=List[StatusCount])
async def status_stats(
    month_keys: List[str] = Query(default=[]),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return await SelectedTopicService(db, user).status_stats(month_keys)


@router.get("/monthly-contribution", response_model=ContributionResponse)
async def monthly_contribution(
    month_keys: List[str] = Query(default=[]),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """月度贡献排行，普通用户只看前 5 名"""
    data, is_limited = await SelectedTopicService(db, user).monthly_contribution(month_keys)
    return ContributionResponse(data=[ContributionEntry(**row) for row in data], is_limited=is_limited)


@router.post("/export", response_model=ExportResponse)
async def export_report(
    data: ExportRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """导出 Excel 报表（base64）"""
    content, filename = await SelectedTopicService(db, user).export(data.month_keys)
    return ExportResponse(data=content, filename=filename)


@router.put("/{topic_id}", response_model=SelectedTopicResponse)
async def update(
    topic_id: int,
    data: SelectedTopicUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """更新入选选题，普通用户只能改进度相关字段"""
    changes = data.model_dump(exclude_unset=True)
    changes.update(data.model_extra or {})
    return await SelectedTopicService(db, user, client_ip(request)).update(topic_id, changes)


@router.delete("/{topic_id}", response_model=SuccessResponse)
async def delete(
    topic_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    await SelectedTopicService(db, admin, client_ip(request)).delete(topic_id)
    return SuccessResponse()
