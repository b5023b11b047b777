import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import AppError
from app.logging_config import setup_logging
from app.routers import auth_router, users_router, submissions_router, selected_topics_router, logs_router
from app.services.auth import AuthService
from app.services.daily_reset import DailyResetJob
from app.tasks.scheduler import SchedulerWrapper

logger = logging.getLogger(__name__)


def _ensure_sqlite_dir(url: str) -> None:
    if url.startswith("sqlite") and ":///" in url:
        path = url.split(":///", 1)[1]
        if path and path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        _ensure_sqlite_dir(settings.DATABASE_URL)

        database = Database(settings.DATABASE_URL)
        app.state.db = database
        logger.info("正在初始化数据库...")
        await database.init_models()
        async with database.session() as session:
            await AuthService(session).ensure_admin(
                settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, settings.ADMIN_NAME
            )

        scheduler = None
        if settings.SCHEDULER_ENABLED:
            scheduler = SchedulerWrapper(DailyResetJob(database, settings.SYSTEM_OWNER_ID))
            await scheduler.start()
        app.state.scheduler = scheduler
        logger.info("应用启动完成")

        yield

        if scheduler:
            await scheduler.stop()
        await database.dispose()
        logger.info("应用已关闭")

    app = FastAPI(
        title="每日选题收集平台",
        description="选题收集、入选管理、进度跟踪与月度报表",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS 配置
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "http://localhost"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"数据库操作失败 {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "服务器内部错误"})

    # 注册路由
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(submissions_router)
    app.include_router(selected_topics_router)
    app.include_router(logs_router)

    @app.get("/")
    async def root():
        return {"message": "每日选题收集平台 API", "version": "1.0.0"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
