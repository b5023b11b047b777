"""入选选题相关模型"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import get_shanghai_now

PROGRESS_VALUES = ("未开始", "进行中", "已完成", "已暂停")
STATUS_VALUES = ("未发布", "已发布", "否决")


class SelectedTopic(Base):
    __tablename__ = "selected_topics"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)  # 去除首尾空白后的选题内容，合并时按此比对
    suggestion = Column(String(255), nullable=True)  # 安排建议：钧评、快评、视频等

    leader_comment = Column(Text, nullable=True)  # 领导点评
    creators = Column(Text, nullable=True)  # 创作人
    progress = Column(String(10), default="未开始", nullable=False)
    status = Column(String(10), default="未发布", nullable=False)
    remark = Column(Text, nullable=True)

    selected_date = Column(Date, nullable=False)
    month_key = Column(String(7), nullable=False, index=True)  # YYYY-MM

    source_submission_id = Column(Integer, nullable=True, index=True)  # 来源 submission_topics.id
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=get_shanghai_now)
    updated_at = Column(DateTime, default=get_shanghai_now, onupdate=get_shanghai_now)

    submitter_rows = relationship(
        "SelectedTopicSubmitter", back_populates="topic", cascade="all, delete-orphan",
        lazy="selectin", order_by="SelectedTopicSubmitter.id"
    )

    @property
    def submitter_names(self) -> list[str]:
        return [row.name for row in self.submitter_rows]

    @property
    def submitters(self) -> str:
        return ",".join(self.submitter_names)


class SelectedTopicSubmitter(Base):
    """选题提报人，同一选题下姓名唯一"""
    __tablename__ = "selected_topic_submitters"
    __table_args__ = (UniqueConstraint("selected_topic_id", "name", name="uq_selected_topic_submitter"),)

    id = Column(Integer, primary_key=True, index=True)
    selected_topic_id = Column(Integer, ForeignKey("selected_topics.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False, index=True)

    topic = relationship("SelectedTopic", back_populates="submitter_rows")
