from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.utils.time_utils import get_shanghai_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt 哈希
    name = Column(String(100), nullable=False)  # 显示名称，也是提报人名
    email = Column(String(320), unique=True, nullable=True)

    role = Column(String(10), default="user", nullable=False)  # user | admin
    status = Column(String(10), default="active", nullable=False)  # active | suspended

    created_at = Column(DateTime, default=get_shanghai_now)
    updated_at = Column(DateTime, default=get_shanghai_now, onupdate=get_shanghai_now)
    last_signed_in = Column(DateTime, default=get_shanghai_now)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
