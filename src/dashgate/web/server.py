from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashgate.app import App
from dashgate.config import Config
from dashgate.errors import UserError
from dashgate.web.cookies import SessionCookieManager
from dashgate.web.error_handlers import general_exception_handler, user_error_handler
from dashgate.web.gate import RouteGateMiddleware
from dashgate.web.openapi import set_custom_openapi
from dashgate.web.routers import auth_router, dashboard_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""
    cookies = SessionCookieManager(app_instance)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Dashgate API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )
    # Available before startup so middleware and handlers never see an empty state
    app.state.app = app_instance
    app.state.cookies = cookies

    app.add_middleware(
        RouteGateMiddleware,
        cookies=cookies,
        protected_prefix=config.protected_prefix,
        login_path=config.login_path,
    )

    # Add CORS middleware for frontend development
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (at root level, not versioned)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix=config.protected_prefix)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app, config.session_cookie_name)

    return app
