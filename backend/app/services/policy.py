"""
角色权限规则
所有按角色放行或截断的判断都集中在这里，路由和服务只调用，不自行比较角色。
"""
from typing import FrozenSet, List, Optional, Sequence, Tuple, TypeVar

from app.exceptions import PermissionDenied

T = TypeVar("T")

# 普通用户可编辑的入选选题字段
USER_EDITABLE_FIELDS: FrozenSet[str] = frozenset({"leader_comment", "creators", "progress", "status", "remark"})

# 普通用户可见的月度贡献排行条数
NON_ADMIN_RANKING_LIMIT = 5


def is_admin(role: str) -> bool:
    return role == "admin"


def allowed_update_fields(role: str) -> Optional[FrozenSet[str]]:
    """返回可编辑字段集合，None 表示不限"""
    if is_admin(role):
        return None
    return USER_EDITABLE_FIELDS


def check_topic_update(role: str, fields) -> None:
    """请求中只要含有不允许的字段，整个更新都被拒绝"""
    allowed = allowed_update_fields(role)
    if allowed is None:
        return
    forbidden = set(fields) - allowed
    if forbidden:
        raise PermissionDenied("普通用户只能编辑进度相关字段")


def visible_row_count(role: str, total: int) -> int:
    if is_admin(role):
        return total
    return min(total, NON_ADMIN_RANKING_LIMIT)


def limit_ranking(role: str, rows: Sequence[T]) -> Tuple[List[T], bool]:
    """按角色截断已排好序的排行，返回 (可见行, 是否被截断)"""
    count = visible_row_count(role, len(rows))
    return list(rows[:count]), not is_admin(role)


def check_role_change(actor_id: int, target_user_id: int) -> None:
    if actor_id == target_user_id:
        raise PermissionDenied("不能修改自己的角色")


def check_status_change(actor_id: int, target_user_id: int) -> None:
    if actor_id == target_user_id:
        raise PermissionDenied("不能暂停自己的账号")


def require_admin(role: str) -> None:
    if not is_admin(role):
        raise PermissionDenied("需要管理员权限")


def require_active(status: str) -> None:
    if status != "active":
        raise PermissionDenied("您的填写权限已被暂停，请联系管理员")
