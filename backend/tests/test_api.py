"""
HTTP 接口测试：认证、用户管理、提交与入选选题
"""
import base64

from app.utils.time_utils import get_shanghai_today
from conftest import login, register_and_login

SUBMIT_BODY = {
    "longTermPlan": "跟进两会报道",
    "topics": [
        {"content": "地方债务调查", "suggestedFormat": ["长文", "视频"], "creator": "张三"},
        {"content": "  ", "suggestedFormat": []},
    ],
    "projects": [{"projectName": "年度专题", "progress": "进行中"}],
}


class TestAuth:

    def test_register_login_me_logout(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json() is None

        user = register_and_login(client, "zhangsan", "张三")
        assert user["role"] == "user"
        assert user["status"] == "active"
        assert "password" not in user
        assert client.cookies.get("topic_session")

        me = client.get("/api/auth/me").json()
        assert me["username"] == "zhangsan"
        assert me["lastSignedIn"] is not None

        assert client.post("/api/auth/logout").json() == {"success": True}
        assert client.get("/api/auth/me").json() is None

    def test_duplicate_username(self, client):
        body = {"username": "zhangsan", "password": "password123", "name": "张三"}
        assert client.post("/api/auth/register", json=body).status_code == 200
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 409
        assert resp.json()["detail"] == "用户名已被使用"

    def test_wrong_password(self, client):
        client.post("/api/auth/register", json={"username": "zhangsan", "password": "password123", "name": "张三"})
        resp = client.post("/api/auth/login", json={"usernameOrEmail": "zhangsan", "password": "wrong-pass"})
        assert resp.status_code == 401
        resp = client.post("/api/auth/login", json={"usernameOrEmail": "nobody", "password": "password123"})
        assert resp.status_code == 401

    def test_invalid_cookie_is_anonymous(self, client):
        client.cookies.set("topic_session", "not-a-token")
        assert client.get("/api/auth/me").json() is None
        assert client.get("/api/submissions/my-stats").status_code == 401


class TestUsers:

    def test_admin_manages_users(self, client):
        register_and_login(client, "zhangsan", "张三")
        client.post("/api/auth/logout")
        admin = login(client, "admin", "admin123")

        users = client.get("/api/users/").json()
        target = next(u for u in users if u["username"] == "zhangsan")

        resp = client.put(f"/api/users/{target['id']}/role", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"

        resp = client.put(f"/api/users/{admin['id']}/role", json={"role": "user"})
        assert resp.status_code == 403

        resp = client.put(f"/api/users/{target['id']}/status")
        assert resp.json()["status"] == "suspended"

        resp = client.put(f"/api/users/{target['id']}/password", json={"newPassword": "newpass123"})
        assert resp.status_code == 200

        logs = client.get("/api/logs/").json()
        actions = {log["action"] for log in logs}
        assert {"UPDATE_USER_ROLE", "TOGGLE_USER_STATUS", "RESET_USER_PASSWORD"} <= actions

        client.post("/api/auth/logout")
        login(client, "zhangsan", "newpass123")

    def test_user_cannot_change_roles(self, client):
        user = register_and_login(client, "zhangsan", "张三")
        assert client.get("/api/users/").status_code == 403
        resp = client.put(f"/api/users/{user['id']}/role", json={"role": "admin"})
        assert resp.status_code == 403

    def test_unknown_role_rejected(self, client):
        register_and_login(client, "zhangsan", "张三")
        client.post("/api/auth/logout")
        login(client, "admin", "admin123")
        target = next(u for u in client.get("/api/users/").json() if u["username"] == "zhangsan")
        resp = client.put(f"/api/users/{target['id']}/role", json={"role": "editor"})
        assert resp.status_code == 422


class TestSubmissions:

    def test_submit_and_read_back(self, client):
        register_and_login(client, "zhangsan", "张三")
        resp = client.post("/api/submissions/submit", json=SUBMIT_BODY)
        assert resp.status_code == 200
        assert resp.json()["topicCount"] == 2

        stats = client.get("/api/submissions/today-stats").json()
        assert stats == {"submissionCount": 1, "topicCount": 2, "userCount": 1}

        today = get_shanghai_today().isoformat()
        data = client.get("/api/submissions/by-date", params={"date": today}).json()
        assert data["form"]["formDate"] == today
        submission = data["submissions"][0]
        assert submission["userName"] == "张三"
        first = submission["topics"][0]
        assert first["suggestedFormat"] == "长文,视频"
        assert first["selected"] is False
        assert submission["topics"][1]["content"] is None

        history = client.get("/api/submissions/my-history").json()
        assert len(history) == 1

    def test_resubmit_replaces_previous(self, client):
        register_and_login(client, "zhangsan", "张三")
        client.post("/api/submissions/submit", json=SUBMIT_BODY)
        body = dict(SUBMIT_BODY, topics=[{"content": "新选题"}])
        client.post("/api/submissions/submit", json=body)

        stats = client.get("/api/submissions/my-stats").json()
        assert stats["totalSubmissions"] == 1
        assert stats["totalTopics"] == 1

    def test_empty_topics_rejected(self, client):
        register_and_login(client, "zhangsan", "张三")
        resp = client.post("/api/submissions/submit", json=dict(SUBMIT_BODY, topics=[]))
        assert resp.status_code == 422

    def test_unknown_date_has_no_form(self, client):
        register_and_login(client, "zhangsan", "张三")
        data = client.get("/api/submissions/by-date", params={"date": "2001-01-01"}).json()
        assert data == {"form": None, "submissions": []}

    def test_suspended_user_cannot_submit(self, client):
        register_and_login(client, "zhangsan", "张三")
        client.post("/api/auth/logout")
        login(client, "admin", "admin123")
        target = next(u for u in client.get("/api/users/").json() if u["username"] == "zhangsan")
        client.put(f"/api/users/{target['id']}/status")
        client.post("/api/auth/logout")

        login(client, "zhangsan")
        resp = client.post("/api/submissions/submit", json=SUBMIT_BODY)
        assert resp.status_code == 403

    def test_submit_requires_login(self, client):
        assert client.post("/api/submissions/submit", json=SUBMIT_BODY).status_code == 401


class TestSelectedTopics:

    def create(self, client, content, submitters, selected_date="2026-02-04", **extra):
        body = {"content": content, "submitters": submitters, "selectedDate": selected_date, **extra}
        resp = client.post("/api/selected-topics/", json=body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    def test_from_submission_marks_source(self, client):
        register_and_login(client, "zhangsan", "张三")
        client.post("/api/submissions/submit", json=SUBMIT_BODY)
        client.post("/api/auth/logout")
        login(client, "admin", "admin123")

        today = get_shanghai_today().isoformat()
        topic_id = client.get("/api/submissions/by-date", params={"date": today}).json()["submissions"][0]["topics"][0]["id"]

        result = client.post("/api/selected-topics/from-submission", json={"submissionTopicId": topic_id}).json()
        assert result["merged"] is False

        by_source = client.get(f"/api/selected-topics/by-source/{topic_id}").json()
        assert by_source["submitters"] == "张三"
        assert by_source["suggestion"] == "长文,视频"

        submission = client.get("/api/submissions/by-date", params={"date": today}).json()["submissions"][0]
        assert submission["topics"][0]["selected"] is True

        resp = client.post("/api/selected-topics/from-submission", json={"submissionTopicId": 9999})
        assert resp.status_code == 404

    def test_merge_and_update_flow(self, client):
        login(client, "admin", "admin123")
        first = self.create(client, "地方债务调查", ["张三"])
        second = self.create(client, "  地方债务调查 ", ["李四", "张三"], "2026-02-20")
        assert second["merged"] is True
        assert second["id"] == first["id"]
        assert second["message"] == "该选题已存在，已合并提报人"

        topics = client.get("/api/selected-topics/", params={"month_key": "2026-02"}).json()
        assert len(topics) == 1
        assert topics[0]["submitters"] == "张三,李四"
        assert client.get("/api/selected-topics/month-keys").json() == ["2026-02"]
        client.post("/api/auth/logout")

        register_and_login(client, "wangwu", "王五")
        resp = client.put(f"/api/selected-topics/{first['id']}", json={"progress": "进行中"})
        assert resp.status_code == 200
        assert resp.json()["progress"] == "进行中"

        resp = client.put(f"/api/selected-topics/{first['id']}", json={"status": "已发布", "content": "篡改"})
        assert resp.status_code == 403
        topic = client.get("/api/selected-topics/all").json()[0]
        assert topic["status"] == "未发布"
        assert topic["content"] == "地方债务调查"

        assert client.delete(f"/api/selected-topics/{first['id']}").status_code == 403
        assert client.post("/api/selected-topics/add", json={
            "content": "x", "submitters": ["王五"], "selectedDate": "2026-02-04",
        }).status_code == 403

    def test_undeclared_fields_reject_whole_update(self, client):
        """带了 monthKey、submitters 的请求整体被拒，进度也不会被修改"""
        login(client, "admin", "admin123")
        created = self.create(client, "地方债务调查", ["张三"])
        body = {"progress": "已完成", "monthKey": "2020-01", "submitters": "王五"}

        resp = client.put(f"/api/selected-topics/{created['id']}", json=body)
        assert resp.status_code == 400
        client.post("/api/auth/logout")

        register_and_login(client, "wangwu", "王五")
        resp = client.put(f"/api/selected-topics/{created['id']}", json=body)
        assert resp.status_code == 403

        topic = client.get("/api/selected-topics/all").json()[0]
        assert topic["progress"] == "未开始"
        assert topic["monthKey"] == "2026-02"
        assert topic["submitters"] == "张三"

    def test_invalid_progress_rejected(self, client):
        login(client, "admin", "admin123")
        created = self.create(client, "地方债务调查", ["张三"])
        resp = client.put(f"/api/selected-topics/{created['id']}", json={"progress": "差不多了"})
        assert resp.status_code == 422

    def test_contribution_and_export_limits(self, client):
        login(client, "admin", "admin123")
        for i in range(6):
            self.create(client, f"选题{i}", [f"人{i}"], status="已发布" if i == 0 else None)

        full = client.get("/api/selected-topics/monthly-contribution", params={"month_keys": ["2026-02"]}).json()
        assert full["isLimited"] is False
        assert len(full["data"]) == 6
        assert full["data"][0] == {
            "name": "人0", "selectedCount": 1, "publishedCount": 1, "rejectedCount": 0, "publishRate": "100.0",
        }
        client.post("/api/auth/logout")

        register_and_login(client, "zhangsan", "张三")
        limited = client.get("/api/selected-topics/monthly-contribution", params={"month_keys": ["2026-02"]}).json()
        assert limited["isLimited"] is True
        assert [row["name"] for row in limited["data"]] == ["人0", "人1", "人2", "人3", "人4"]

        status = client.get("/api/selected-topics/status-stats", params={"month_keys": ["2026-02"]}).json()
        assert {"status": "已发布", "count": 1} in status

        resp = client.post("/api/selected-topics/export", json={"monthKeys": ["2026-02"]})
        assert resp.status_code == 200
        payload = resp.json()
        assert payload["filename"] == "选题系统报表_2026-02.xlsx"
        assert base64.b64decode(payload["data"])[:2] == b"PK"

    def test_requires_login(self, client):
        assert client.get("/api/selected-topics/all").status_code == 401
        assert client.get("/health").json() == {"status": "ok"}
