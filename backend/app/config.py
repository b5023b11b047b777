import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self, **overrides):
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/topic_collection.db")
        self.JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production")
        self.SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "topic_session")
        self.SESSION_DAYS: int = int(os.getenv("SESSION_DAYS", "7"))
        self.MERGE_SCOPE: str = os.getenv("MERGE_SCOPE", "month")  # month | global
        self.SCHEDULER_ENABLED: bool = _env_bool("SCHEDULER_ENABLED", "true")
        self.SYSTEM_OWNER_ID: int = int(os.getenv("SYSTEM_OWNER_ID", "1"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_DIR: str = os.getenv("LOG_DIR", "./logs")
        self.ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
        self.ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")
        self.ADMIN_NAME: str = os.getenv("ADMIN_NAME", "管理员")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"未知配置项: {key}")
            setattr(self, key, value)

        if self.MERGE_SCOPE not in ("month", "global"):
            raise ValueError(f"MERGE_SCOPE 只能是 month 或 global，当前为 {self.MERGE_SCOPE}")


settings = Settings()
