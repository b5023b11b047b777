"""操作日志，只追加不修改"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.database import Base
from app.utils.time_utils import get_shanghai_now


class SystemLog(Base):
    __tablename__ = "system_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True)  # 操作人
    action = Column(String(100), nullable=False)  # 如 ADD_SELECTED_TOPIC
    target = Column(String(255), nullable=True)  # 如 "Topic 3"
    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, default=get_shanghai_now, index=True)
