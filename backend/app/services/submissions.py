"""每日选题提交"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.form import CollectionForm
from app.models.selected_topic import SelectedTopic, SelectedTopicSubmitter
from app.models.submission import Submission, SubmissionProject, SubmissionTopic
from app.models.user import User
from app.schemas import (
    CollectionFormResponse, SubmissionProjectResponse, SubmissionResponse,
    SubmissionTopicResponse, SubmissionsByDate, SubmitRequest,
)
from app.services import policy
from app.utils.time_utils import form_title, get_shanghai_now, get_shanghai_today

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


async def get_or_create_form(session: AsyncSession, form_date: date, created_by: int) -> CollectionForm:
    """取当天收集表，没有则创建（不提交）"""
    result = await session.execute(select(CollectionForm).where(CollectionForm.form_date == form_date))
    form = result.scalar_one_or_none()
    if form:
        return form

    form = CollectionForm(form_date=form_date, title=form_title(form_date), created_by=created_by)
    session.add(form)
    await session.flush()
    logger.info("创建收集表: %s", form.title)
    return form


def to_response(submission: Submission, selected_topic_ids: set = frozenset()) -> SubmissionResponse:
    return SubmissionResponse(
        id=submission.id,
        user_id=submission.user_id,
        user_name=(submission.user.name if submission.user else None) or "未知用户",
        collection_form_id=submission.collection_form_id,
        long_term_plan=submission.long_term_plan,
        work_suggestion=submission.work_suggestion,
        risk_warning=submission.risk_warning,
        submitted_at=submission.submitted_at,
        topics=[
            SubmissionTopicResponse(
                id=t.id,
                content=t.content,
                suggested_format=t.suggested_format,
                creative_idea=t.creative_idea,
                creator=t.creator,
                related_link=t.related_link,
                selected=t.id in selected_topic_ids,
            )
            for t in submission.topics
        ],
        projects=[SubmissionProjectResponse.model_validate(p) for p in submission.projects],
    )


class SubmissionService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def submit(self, user: User, data: SubmitRequest) -> Submission:
        """提交当天选题；同一天重复提交会覆盖本人之前的内容"""
        policy.require_active(user.status)

        today = get_shanghai_today()
        form = await get_or_create_form(self._session, today, user.id)

        result = await self._session.execute(
            select(Submission).where(
                Submission.user_id == user.id,
                Submission.collection_form_id == form.id,
            )
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            submission = Submission(user_id=user.id, collection_form_id=form.id)
            self._session.add(submission)

        submission.long_term_plan = _clean(data.long_term_plan)
        submission.work_suggestion = _clean(data.work_suggestion)
        submission.risk_warning = _clean(data.risk_warning)
        submission.submitted_at = get_shanghai_now()
        submission.topics = [
            SubmissionTopic(
                content=_clean(t.content),
                suggested_format=",".join(f.strip() for f in t.suggested_format if f.strip()) or None,
                creative_idea=_clean(t.creative_idea),
                creator=_clean(t.creator),
                related_link=_clean(t.related_link),
            )
            for t in data.topics
        ]
        submission.projects = [
            SubmissionProject(project_name=_clean(p.project_name), progress=p.progress, note=_clean(p.note))
            for p in data.projects
        ]

        await self._session.commit()
        await self._session.refresh(submission)
        logger.info("用户 %s 提交了 %d 个选题、%d 个项目", user.username, len(data.topics), len(data.projects))
        return submission

    async def get_by_date(self, form_date: date) -> SubmissionsByDate:
        result = await self._session.execute(select(CollectionForm).where(CollectionForm.form_date == form_date))
        form = result.scalar_one_or_none()
        if not form:
            return SubmissionsByDate(form=None, submissions=[])

        result = await self._session.execute(
            select(Submission)
            .where(Submission.collection_form_id == form.id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        )
        submissions = list(result.scalars().all())

        topic_ids = [t.id for s in submissions for t in s.topics]
        selected_ids = set()
        if topic_ids:
            result = await self._session.execute(
                select(SelectedTopic.source_submission_id).where(SelectedTopic.source_submission_id.in_(topic_ids))
            )
            selected_ids = set(result.scalars().all())

        return SubmissionsByDate(
            form=CollectionFormResponse.model_validate(form),
            submissions=[to_response(s, selected_ids) for s in submissions],
        )

    async def today_stats(self, form_date: Optional[date] = None) -> dict:
        form_date = form_date or get_shanghai_today()
        result = await self._session.execute(
            select(
                func.count(distinct(Submission.id)),
                func.count(distinct(Submission.user_id)),
            )
            .join(CollectionForm, Submission.collection_form_id == CollectionForm.id)
            .where(CollectionForm.form_date == form_date)
        )
        submission_count, user_count = result.one()

        result = await self._session.execute(
            select(func.count(SubmissionTopic.id))
            .join(Submission, SubmissionTopic.submission_id == Submission.id)
            .join(CollectionForm, Submission.collection_form_id == CollectionForm.id)
            .where(CollectionForm.form_date == form_date)
        )
        return {
            "submission_count": submission_count or 0,
            "topic_count": result.scalar_one() or 0,
            "user_count": user_count or 0,
        }

    async def my_history(self, user: User) -> list[Submission]:
        result = await self._session.execute(
            select(Submission)
            .where(Submission.user_id == user.id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        )
        return list(result.scalars().all())

    async def my_stats(self, user: User) -> dict:
        result = await self._session.execute(
            select(func.count(Submission.id)).where(Submission.user_id == user.id)
        )
        total_submissions = result.scalar_one()

        result = await self._session.execute(
            select(func.count(SubmissionTopic.id))
            .join(Submission, SubmissionTopic.submission_id == Submission.id)
            .where(Submission.user_id == user.id)
        )
        total_topics = result.scalar_one()

        # 入选数按提报人姓名统计
        result = await self._session.execute(
            select(func.count(distinct(SelectedTopicSubmitter.selected_topic_id)))
            .where(SelectedTopicSubmitter.name == user.name)
        )
        total_selected = result.scalar_one()

        return {
            "total_submissions": total_submissions,
            "total_topics": total_topics,
            "total_selected": total_selected,
        }
