"""
入选选题合并引擎
加入入选池时按去除首尾空白后的内容查重：命中则并入提报人，否则新建。
查重范围由 MERGE_SCOPE 决定，month 只比对同一月份，global 比对全部。
查重与插入是两条独立语句，并发加入同一新内容仍可能产生两条记录。
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound, ValidationError
from app.models.selected_topic import SelectedTopic, SelectedTopicSubmitter
from app.models.submission import Submission, SubmissionTopic
from app.models.user import User
from app.services import audit
from app.utils.time_utils import get_shanghai_now, get_shanghai_today, month_key

logger = logging.getLogger(__name__)

MERGED_MESSAGE = "该选题已存在，已合并提报人"
ALREADY_LISTED_MESSAGE = "该选题已存在，提报人已在列表中"


@dataclass
class MergeOutcome:
    id: int
    merged: bool
    message: Optional[str] = None


def normalize_submitters(submitters: Iterable[str]) -> List[str]:
    """去空白、去重，保持原顺序"""
    names = []
    for name in submitters:
        name = (name or "").strip()
        if name and name not in names:
            names.append(name)
    return names


class SelectionMergeEngine:
    def __init__(
        self,
        session: AsyncSession,
        actor: User,
        merge_scope: str = "month",
        ip_address: Optional[str] = None,
    ) -> None:
        self._session = session
        self._actor = actor
        self._scope = merge_scope
        self._ip = ip_address

    async def find_duplicate(self, content: str, key: str) -> Optional[SelectedTopic]:
        query = select(SelectedTopic).where(SelectedTopic.content == content)
        if self._scope == "month":
            query = query.where(SelectedTopic.month_key == key)
        result = await self._session.execute(query.order_by(SelectedTopic.id).limit(1))
        return result.scalar_one_or_none()

    async def add(
        self,
        content: str,
        suggestion: Optional[str],
        submitters: Iterable[str],
        selected_date: date,
        source_submission_id: Optional[int] = None,
        **initial_fields,
    ) -> MergeOutcome:
        """
        加入入选池。

        initial_fields 可带 leader_comment/creators/progress/status/remark，
        只在新建记录时生效，合并时忽略。
        """
        normalized = (content or "").strip()
        if not normalized:
            raise ValidationError("选题内容不能为空")
        names = normalize_submitters(submitters)
        if not names:
            raise ValidationError("至少需要一位提报人")

        key = month_key(selected_date)
        existing = await self.find_duplicate(normalized, key)
        if existing:
            return await self._merge(existing, names)

        topic = SelectedTopic(
            content=normalized,
            suggestion=(suggestion or "").strip() or None,
            leader_comment=initial_fields.get("leader_comment"),
            creators=initial_fields.get("creators"),
            progress=initial_fields.get("progress") or "未开始",
            status=initial_fields.get("status") or "未发布",
            remark=initial_fields.get("remark"),
            selected_date=selected_date,
            month_key=key,
            source_submission_id=source_submission_id,
            created_by=self._actor.id,
            submitter_rows=[SelectedTopicSubmitter(name=name) for name in names],
        )
        self._session.add(topic)
        await self._session.flush()

        audit.record(
            self._session, self._actor.id, "ADD_SELECTED_TOPIC", f"Topic {topic.id}",
            {"content": normalized, "submitters": names}, self._ip,
        )
        await self._session.commit()
        logger.info("新增入选选题 %s: %s", topic.id, normalized)
        return MergeOutcome(id=topic.id, merged=False)

    async def _merge(self, topic: SelectedTopic, names: List[str]) -> MergeOutcome:
        current = set(topic.submitter_names)
        added = [name for name in names if name not in current]
        for name in added:
            topic.submitter_rows.append(SelectedTopicSubmitter(name=name))
        if added:
            topic.updated_at = get_shanghai_now()

        audit.record(
            self._session, self._actor.id, "MERGE_SELECTED_TOPIC", f"Topic {topic.id}",
            {"content": topic.content, "addedSubmitters": added}, self._ip,
        )
        await self._session.commit()
        logger.info("入选选题 %s 合并提报人: %s", topic.id, added or "无新增")
        return MergeOutcome(
            id=topic.id,
            merged=True,
            message=MERGED_MESSAGE if added else ALREADY_LISTED_MESSAGE,
        )

    async def add_from_submission(self, submission_topic_id: int, selected_date: Optional[date] = None) -> MergeOutcome:
        """从当天提交的选题直接加入，提报人为提交者"""
        result = await self._session.execute(
            select(SubmissionTopic, User)
            .join(Submission, SubmissionTopic.submission_id == Submission.id)
            .join(User, Submission.user_id == User.id)
            .where(SubmissionTopic.id == submission_topic_id)
        )
        row = result.first()
        if not row:
            raise NotFound("来源选题不存在")
        source, submitter = row

        return await self.add(
            content=source.content or "",
            suggestion=source.suggested_format,
            submitters=[submitter.name],
            selected_date=selected_date or get_shanghai_today(),
            source_submission_id=source.id,
        )
