"""
每日重置任务
工作日 12:00（北京时间）清除当天的提交记录，并为明天准备收集表。
触发判断 should_fire_at 与执行 reset_today 分开，便于用固定时间测试。
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select

from app.database import Database
from app.models.form import CollectionForm
from app.models.submission import Submission, SubmissionProject, SubmissionTopic
from app.utils.time_utils import SHANGHAI_TZ, day_bounds, form_title, to_shanghai

logger = logging.getLogger(__name__)

RESET_HOUR = 12
RESET_MINUTE = 0
RESET_DAYS_OF_WEEK = "mon-fri"


def is_weekday(moment: datetime) -> bool:
    return to_shanghai(moment).weekday() < 5


def should_fire_at(now: datetime) -> bool:
    """工作日 12:00 这一分钟内返回 True"""
    local = to_shanghai(now)
    return is_weekday(local) and local.hour == RESET_HOUR and local.minute == RESET_MINUTE


@dataclass
class ResetResult:
    day: date
    skipped: Optional[str] = None  # weekend | no_submissions
    deleted_submissions: int = 0
    deleted_topics: int = 0
    deleted_projects: int = 0
    created_form_date: Optional[date] = None


class DailyResetJob:
    def __init__(self, database: Database, system_owner_id: int = 1) -> None:
        self._database = database
        self._owner_id = system_owner_id

    async def reset_today(self, now: Optional[datetime] = None) -> ResetResult:
        """
        删除当天 [0 点, 次日 0 点) 提交的记录及其选题、项目，删除当天收集表并创建明天的收集表。
        当天没有提交时什么都不改，当天的收集表保留。
        所有修改在一次提交中生效，出错时整体回滚。
        """
        local = to_shanghai(now or datetime.now(SHANGHAI_TZ))
        today = local.date()

        if not is_weekday(local):
            logger.info("[DailyReset] %s 不是工作日，跳过", today)
            return ResetResult(day=today, skipped="weekend")

        start, end = day_bounds(today)
        async with self._database.session() as session:
            result = await session.execute(
                select(Submission.id).where(Submission.submitted_at >= start, Submission.submitted_at < end)
            )
            submission_ids = list(result.scalars().all())
            if not submission_ids:
                logger.info("[DailyReset] %s 没有提交记录，无需重置", today)
                return ResetResult(day=today, skipped="no_submissions")

            topics = await session.execute(
                delete(SubmissionTopic).where(SubmissionTopic.submission_id.in_(submission_ids))
            )
            projects = await session.execute(
                delete(SubmissionProject).where(SubmissionProject.submission_id.in_(submission_ids))
            )
            submissions = await session.execute(delete(Submission).where(Submission.id.in_(submission_ids)))
            await session.execute(delete(CollectionForm).where(CollectionForm.form_date == today))

            tomorrow = today + timedelta(days=1)
            created = None
            existing = await session.execute(select(CollectionForm.id).where(CollectionForm.form_date == tomorrow))
            if existing.scalar_one_or_none() is None:
                session.add(CollectionForm(form_date=tomorrow, title=form_title(tomorrow), created_by=self._owner_id))
                created = tomorrow

            await session.commit()

        outcome = ResetResult(
            day=today,
            deleted_submissions=submissions.rowcount,
            deleted_topics=topics.rowcount,
            deleted_projects=projects.rowcount,
            created_form_date=created,
        )
        logger.info(
            "[DailyReset] %s 已删除 %d 条提交、%d 个选题、%d 个项目，明天的收集表: %s",
            today, outcome.deleted_submissions, outcome.deleted_topics, outcome.deleted_projects,
            created or "已存在",
        )
        return outcome

    async def run(self, now: Optional[datetime] = None) -> Optional[ResetResult]:
        """定时器入口，错误只记录不抛出，错过的这次不会补跑"""
        now = now or datetime.now(SHANGHAI_TZ)
        if not should_fire_at(now):
            logger.warning("[DailyReset] 触发时间 %s 不在重置窗口内，跳过", to_shanghai(now))
            return None
        logger.info("[DailyReset] 开始执行每日重置...")
        try:
            return await self.reset_today(now)
        except Exception as e:
            logger.error(f"[DailyReset] 每日重置失败: {e}", exc_info=True)
            return None
