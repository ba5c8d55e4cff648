from dashgate.web.routers.auth import router as auth_router
from dashgate.web.routers.dashboard import router as dashboard_router

__all__ = [
    "auth_router",
    "dashboard_router",
]
