"""
角色权限规则测试
"""
import pytest

from app.exceptions import PermissionDenied
from app.services import policy


class TestTopicUpdateGate:
    """入选选题字段编辑权限"""

    def test_user_may_edit_progress_fields(self):
        policy.check_topic_update("user", ["leader_comment", "creators", "progress", "status", "remark"])

    def test_user_rejected_when_any_field_outside_allowed(self):
        """只要出现一个不允许的字段，整体拒绝"""
        with pytest.raises(PermissionDenied):
            policy.check_topic_update("user", ["progress", "content"])

    def test_user_rejected_for_selected_date(self):
        with pytest.raises(PermissionDenied):
            policy.check_topic_update("user", ["selected_date"])

    def test_admin_may_edit_anything(self):
        policy.check_topic_update("admin", ["content", "suggestion", "selected_date", "progress"])
        assert policy.allowed_update_fields("admin") is None


class TestRankingLimit:
    """月度贡献排行可见条数"""

    def test_user_sees_top_five(self):
        rows = list(range(8))
        visible, limited = policy.limit_ranking("user", rows)
        assert visible == [0, 1, 2, 3, 4]
        assert limited is True

    def test_user_with_short_list_sees_all(self):
        visible, _ = policy.limit_ranking("user", [1, 2])
        assert visible == [1, 2]

    def test_admin_sees_everything(self):
        rows = list(range(8))
        visible, limited = policy.limit_ranking("admin", rows)
        assert visible == rows
        assert limited is False

    def test_visible_row_count(self):
        assert policy.visible_row_count("user", 12) == 5
        assert policy.visible_row_count("admin", 12) == 12


class TestRoleChange:

    def test_self_role_change_rejected(self):
        with pytest.raises(PermissionDenied):
            policy.check_role_change(3, 3)

    def test_other_role_change_allowed(self):
        policy.check_role_change(1, 2)

    def test_suspended_user_cannot_submit(self):
        with pytest.raises(PermissionDenied):
            policy.require_active("suspended")
        policy.require_active("active")
