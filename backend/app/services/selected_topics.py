"""入选选题的查询、编辑、统计与导出"""
import base64
import logging
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound, ValidationError
from app.models.selected_topic import PROGRESS_VALUES, STATUS_VALUES, SelectedTopic
from app.models.user import User
from app.services import audit, policy
from app.services.exporter import export_report
from app.utils.time_utils import get_shanghai_now, month_key

logger = logging.getLogger(__name__)

# 允许通过编辑接口修改的字段
UPDATABLE_FIELDS = frozenset({
    "content", "suggestion", "leader_comment", "creators", "progress", "status", "remark", "selected_date",
})


def rank_contribution(topics: Sequence[SelectedTopic]) -> list[dict]:
    """
    按提报人统计入选、发布、否决数量，按入选数降序。
    同数时保持提报人首次出现的顺序。
    """
    stats: dict[str, dict] = {}
    for topic in topics:
        for name in topic.submitter_names:
            entry = stats.setdefault(name, {
                "name": name,
                "selected_count": 0,
                "published_count": 0,
                "rejected_count": 0,
            })
            entry["selected_count"] += 1
            if topic.status == "已发布":
                entry["published_count"] += 1
            elif topic.status == "否决":
                entry["rejected_count"] += 1

    ranked = sorted(stats.values(), key=lambda e: -e["selected_count"])
    for entry in ranked:
        rate = entry["published_count"] / entry["selected_count"] * 100 if entry["selected_count"] else 0
        entry["publish_rate"] = f"{rate:.1f}"
    return ranked


class SelectedTopicService:
    def __init__(self, session: AsyncSession, actor: User, ip_address: Optional[str] = None) -> None:
        self._session = session
        self._actor = actor
        self._ip = ip_address

    async def _get(self, topic_id: int) -> SelectedTopic:
        topic = await self._session.get(SelectedTopic, topic_id)
        if not topic:
            raise NotFound("选题不存在")
        return topic

    async def list_by_month(self, key: str) -> list[SelectedTopic]:
        result = await self._session.execute(
            select(SelectedTopic)
            .where(SelectedTopic.month_key == key)
            .order_by(SelectedTopic.selected_date.desc(), SelectedTopic.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[SelectedTopic]:
        result = await self._session.execute(
            select(SelectedTopic).order_by(SelectedTopic.selected_date.desc(), SelectedTopic.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_months(self, month_keys: Sequence[str]) -> list[SelectedTopic]:
        """按 id 升序返回，排行的同分顺序依赖这一点"""
        if not month_keys:
            return []
        result = await self._session.execute(
            select(SelectedTopic)
            .where(SelectedTopic.month_key.in_(list(month_keys)))
            .order_by(SelectedTopic.id)
        )
        return list(result.scalars().all())

    async def month_keys(self) -> list[str]:
        result = await self._session.execute(
            select(SelectedTopic.month_key).distinct().order_by(SelectedTopic.month_key.desc())
        )
        return list(result.scalars().all())

    async def get_by_source(self, submission_topic_id: int) -> Optional[SelectedTopic]:
        result = await self._session.execute(
            select(SelectedTopic)
            .where(SelectedTopic.source_submission_id == submission_topic_id)
            .order_by(SelectedTopic.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update(self, topic_id: int, changes: dict) -> SelectedTopic:
        """
        changes 只包含请求中实际出现的字段。
        普通用户带了进度字段以外的任何字段，整个请求被拒绝。
        未知字段（如 month_key、submitters）对管理员同样被拒绝。
        """
        topic = await self._get(topic_id)
        policy.check_topic_update(self._actor.role, changes.keys())
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"不支持修改的字段: {', '.join(sorted(unknown))}")

        if "content" in changes:
            content = (changes["content"] or "").strip()
            if not content:
                raise ValidationError("选题内容不能为空")
            changes["content"] = content
        if "progress" in changes and changes["progress"] is None:
            raise ValidationError("进度不能为空")
        if "status" in changes and changes["status"] is None:
            raise ValidationError("状态不能为空")
        if "selected_date" in changes:
            if changes["selected_date"] is None:
                raise ValidationError("入选日期不能为空")
            changes["month_key"] = month_key(changes["selected_date"])

        for key, value in changes.items():
            setattr(topic, key, value)
        topic.updated_at = get_shanghai_now()

        details = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in changes.items()}
        audit.record(self._session, self._actor.id, "UPDATE_SELECTED_TOPIC", f"Topic {topic_id}", details, self._ip)
        await self._session.commit()
        return topic

    async def delete(self, topic_id: int) -> None:
        policy.require_admin(self._actor.role)
        topic = await self._get(topic_id)
        content = topic.content
        await self._session.delete(topic)
        audit.record(
            self._session, self._actor.id, "DELETE_SELECTED_TOPIC", f"Topic {topic_id}",
            {"content": content}, self._ip,
        )
        await self._session.commit()
        logger.info("删除入选选题 %s", topic_id)

    async def _count_by(self, column, values: Sequence[str], month_keys: Optional[Sequence[str]]) -> dict:
        query = select(column, func.count(SelectedTopic.id)).group_by(column)
        if month_keys:
            query = query.where(SelectedTopic.month_key.in_(list(month_keys)))
        result = await self._session.execute(query)
        counts = {value: 0 for value in values}
        for value, count in result.all():
            counts[value] = count
        return counts

    async def progress_stats(self, month_keys: Optional[Sequence[str]] = None) -> list[dict]:
        counts = await self._count_by(SelectedTopic.progress, PROGRESS_VALUES, month_keys)
        return [{"progress": k, "count": v} for k, v in counts.items()]

    async def status_stats(self, month_keys: Optional[Sequence[str]] = None) -> list[dict]:
        counts = await self._count_by(SelectedTopic.status, STATUS_VALUES, month_keys)
        return [{"status": k, "count": v} for k, v in counts.items()]

    async def monthly_contribution(self, month_keys: Sequence[str]) -> tuple[list[dict], bool]:
        """返回 (可见排行, 是否被截断)"""
        ranked = rank_contribution(await self.list_for_months(month_keys))
        return policy.limit_ranking(self._actor.role, ranked)

    async def export(self, month_keys: Sequence[str]) -> tuple[str, str]:
        """生成报表，返回 (base64 内容, 建议文件名)"""
        keys = [k.strip() for k in month_keys if k and k.strip()]
        if not keys:
            raise ValidationError("请至少选择一个月份")

        topics = await self.list_for_months(keys)
        contribution, _ = policy.limit_ranking(self._actor.role, rank_contribution(topics))
        progress = {row["progress"]: row["count"] for row in await self.progress_stats(keys)}
        status = {row["status"]: row["count"] for row in await self.status_stats(keys)}

        content = export_report(topics, contribution, progress, status, keys)
        filename = f"选题系统报表_{'_'.join(keys)}.xlsx"
        logger.info("用户 %s 导出报表 %s", self._actor.username, filename)
        return base64.b64encode(content).decode("ascii"), filename
