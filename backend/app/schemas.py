from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal
from datetime import date, datetime

from app.models.selected_topic import PROGRESS_VALUES, STATUS_VALUES

Role = Literal["user", "admin"]
Progress = Literal[PROGRESS_VALUES]
PublishStatus = Literal[STATUS_VALUES]
ProjectProgress = Literal["未开始", "已开始", "进行中", "已完成", "已暂停"]


class CamelModel(BaseModel):
    """前端使用驼峰字段名，后端按下划线命名"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ========== 认证与用户 ==========

class RegisterRequest(CamelModel):
    username: str = Field(min_length=2, max_length=50)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6, max_length=72)
    name: str = Field(min_length=1, max_length=100)


class RegisterResponse(CamelModel):
    success: bool = True
    user_id: int


class LoginRequest(CamelModel):
    username_or_email: str
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    email: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None
    last_signed_in: Optional[datetime] = None


class LoginResponse(CamelModel):
    success: bool = True
    user: UserResponse


class RoleUpdate(CamelModel):
    role: Role


class PasswordReset(CamelModel):
    new_password: str = Field(min_length=6, max_length=72)


class SuccessResponse(CamelModel):
    success: bool = True


# ========== 每日提交 ==========

class TopicEntry(CamelModel):
    content: Optional[str] = None
    suggested_format: List[str] = []  # 钧评、快评、长文、视频……
    creative_idea: Optional[str] = None
    creator: Optional[str] = None
    related_link: Optional[str] = None


class ProjectEntry(CamelModel):
    project_name: Optional[str] = None
    progress: Optional[ProjectProgress] = None
    note: Optional[str] = None


class SubmitRequest(CamelModel):
    long_term_plan: Optional[str] = None
    work_suggestion: Optional[str] = None
    risk_warning: Optional[str] = None
    topics: List[TopicEntry] = Field(min_length=1)
    projects: List[ProjectEntry] = Field(min_length=1)


class SubmitResponse(CamelModel):
    success: bool = True
    submission_id: int
    topic_count: int
    project_count: int


class CollectionFormResponse(CamelModel):
    id: int
    form_date: date
    title: str
    created_by: int


class SubmissionTopicResponse(CamelModel):
    id: int
    content: Optional[str] = None
    suggested_format: Optional[str] = None
    creative_idea: Optional[str] = None
    creator: Optional[str] = None
    related_link: Optional[str] = None
    selected: bool = False  # 是否已入选


class SubmissionProjectResponse(CamelModel):
    id: int
    project_name: Optional[str] = None
    progress: Optional[str] = None
    note: Optional[str] = None


class SubmissionResponse(CamelModel):
    id: int
    user_id: int
    user_name: str
    collection_form_id: int
    long_term_plan: Optional[str] = None
    work_suggestion: Optional[str] = None
    risk_warning: Optional[str] = None
    submitted_at: datetime
    topics: List[SubmissionTopicResponse] = []
    projects: List[SubmissionProjectResponse] = []


class SubmissionsByDate(CamelModel):
    form: Optional[CollectionFormResponse] = None
    submissions: List[SubmissionResponse] = []


class TodayStats(CamelModel):
    submission_count: int
    topic_count: int
    user_count: int


class MyStats(CamelModel):
    total_submissions: int
    total_topics: int
    total_selected: int


# ========== 入选选题 ==========

class SelectedAddRequest(CamelModel):
    content: str
    suggestion: Optional[str] = None
    submitters: List[str] = Field(min_length=1)
    selected_date: date
    source_submission_id: Optional[int] = None


class SelectedCreateRequest(SelectedAddRequest):
    leader_comment: Optional[str] = None
    creators: Optional[str] = None
    progress: Optional[Progress] = None
    status: Optional[PublishStatus] = None
    remark: Optional[str] = None


class FromSubmissionRequest(CamelModel):
    submission_topic_id: int
    selected_date: Optional[date] = None


class MergeResult(CamelModel):
    success: bool = True
    id: int
    merged: bool
    message: Optional[str] = None


class SelectedTopicUpdate(CamelModel):
    """未声明的字段也保留下来，由服务层决定拒绝"""
    model_config = ConfigDict(extra="allow")

    content: Optional[str] = None
    suggestion: Optional[str] = None
    leader_comment: Optional[str] = None
    creators: Optional[str] = None
    progress: Optional[Progress] = None
    status: Optional[PublishStatus] = None
    remark: Optional[str] = None
    selected_date: Optional[date] = None


class SelectedTopicResponse(CamelModel):
    id: int
    content: str
    suggestion: Optional[str] = None
    submitters: str  # 逗号分隔，按加入顺序
    leader_comment: Optional[str] = None
    creators: Optional[str] = None
    progress: str
    status: str
    remark: Optional[str] = None
    selected_date: date
    month_key: str
    source_submission_id: Optional[int] = None
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressCount(CamelModel):
    progress: str
    count: int


class StatusCount(CamelModel):
    status: str
    count: int


class ContributionEntry(CamelModel):
    name: str
    selected_count: int
    published_count: int
    rejected_count: int
    publish_rate: str  # 百分比数值，不带 %，如 "66.7"


class ContributionResponse(CamelModel):
    data: List[ContributionEntry]
    is_limited: bool


class ExportRequest(CamelModel):
    month_keys: List[str] = Field(min_length=1)


class ExportResponse(CamelModel):
    data: str  # base64 编码的 xlsx
    filename: str


# ========== 操作日志 ==========

class SystemLogResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    action: str
    target: Optional[str] = None
    details: Optional[dict] = None
    ip_address: Optional[str] = None
    created_at: datetime
