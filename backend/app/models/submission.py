from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import get_shanghai_now


class Submission(Base):
    """用户当天的一次提交，每人每张收集表一条"""
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("user_id", "collection_form_id", name="uq_submission_user_form"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    collection_form_id = Column(Integer, ForeignKey("collection_forms.id"), nullable=False, index=True)

    long_term_plan = Column(Text, nullable=True)  # 长期策划
    work_suggestion = Column(Text, nullable=True)  # 工作建议
    risk_warning = Column(Text, nullable=True)  # 风险提示

    submitted_at = Column(DateTime, default=get_shanghai_now, index=True)

    user = relationship("User", lazy="selectin")
    topics = relationship(
        "SubmissionTopic", back_populates="submission", cascade="all, delete-orphan",
        lazy="selectin", order_by="SubmissionTopic.id"
    )
    projects = relationship(
        "SubmissionProject", back_populates="submission", cascade="all, delete-orphan",
        lazy="selectin", order_by="SubmissionProject.id"
    )


class SubmissionTopic(Base):
    __tablename__ = "submission_topics"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    suggested_format = Column(String(255), nullable=True)  # 逗号分隔，如 "钧评,长文"
    creative_idea = Column(Text, nullable=True)
    creator = Column(String(255), nullable=True)
    related_link = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=get_shanghai_now)

    submission = relationship("Submission", back_populates="topics")


class SubmissionProject(Base):
    __tablename__ = "submission_projects"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)
    project_name = Column(String(255), nullable=True)
    progress = Column(String(20), nullable=True)  # 未开始|已开始|进行中|已完成|已暂停
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=get_shanghai_now)

    submission = relationship("Submission", back_populates="projects")
