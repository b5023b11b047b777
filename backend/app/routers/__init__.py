from app.routers.auth import router as auth_router
from app.routers.users import router as users_router
from app.routers.submissions import router as submissions_router
from app.routers.selected_topics import router as selected_topics_router
from app.routers.logs import router as logs_router

__all__ = ["auth_router", "users_router", "submissions_router", "selected_topics_router", "logs_router"]
