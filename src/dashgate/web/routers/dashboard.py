from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from dashgate.web.deps import AppDep, SessionDep
from dashgate.web.gate import REDIRECT_PARAM, sanitize_redirect

router = APIRouter(tags=["dashboard"])


class DashboardView(BaseModel):
    """Landing data for the signed-in dashboard, re-validated server side."""

    username: str = Field(..., description="Signed-in username")
    expires_at: int = Field(..., description="Session expiry, epoch milliseconds")


class LoginPageView(BaseModel):
    """What the login page needs to render its form."""

    login_endpoint: str = Field(..., description="Endpoint accepting the login form")
    redirect_to: str = Field(..., description="Page to return to after signing in")


@router.get("", summary="Dashboard landing", operation_id="getDashboard")
async def dashboard(session: SessionDep) -> DashboardView:
    return DashboardView(username=session.username, expires_at=session.expires_at)


@router.get("/login", summary="Login page", operation_id="getLoginPage")
async def login_page(
    app: AppDep, redirect: Annotated[str | None, Query(alias=REDIRECT_PARAM)] = None
) -> LoginPageView:
    return LoginPageView(
        login_endpoint="/api/v1/auth/login",
        redirect_to=sanitize_redirect(redirect, app.config.protected_prefix),
    )
