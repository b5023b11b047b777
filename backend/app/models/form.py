"""每日选题收集表"""
from sqlalchemy import Column, Integer, String, Date, DateTime
from app.database import Base
from app.utils.time_utils import get_shanghai_now


class CollectionForm(Base):
    __tablename__ = "collection_forms"

    id = Column(Integer, primary_key=True, index=True)
    form_date = Column(Date, unique=True, nullable=False, index=True)  # 每天至多一张
    title = Column(String(255), nullable=False)  # 如 "2026年02月04日 选题收集"
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=get_shanghai_now)
