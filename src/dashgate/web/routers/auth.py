from fastapi import APIRouter, Response
from pydantic import AliasChoices, BaseModel, Field

from dashgate.web.deps import AppDep, CookiesDep, SessionDep
from dashgate.web.gate import sanitize_redirect
from dashgate.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request, optionally completing a forced password change."""

    username: str = Field(..., min_length=1, description="Username for authentication")
    password: str = Field(..., min_length=1, description="Current password")
    new_password: str | None = Field(
        None,
        validation_alias=AliasChoices("new_password", "newPassword"),
        description="Replacement password, required when a password change is pending",
    )
    confirm_password: str | None = Field(
        None,
        validation_alias=AliasChoices("confirm_password", "confirmPassword"),
        description="Must equal new_password",
    )
    redirect_to: str | None = Field(
        None,
        validation_alias=AliasChoices("redirect_to", "redirectTo"),
        description="Page to return to after signing in",
    )


class LoginResponse(BaseModel):
    """Authentication response. The session itself travels in an HttpOnly cookie."""

    success: bool = Field(True, description="Always true, failures use error responses")
    username: str = Field(..., description="Authenticated username")
    redirect_to: str = Field(..., description="Sanitized same-site path to navigate to")


class SessionView(BaseModel):
    """Claims of a verified session."""

    username: str = Field(..., description="Signed-in username")
    expires_at: int = Field(..., description="Session expiry, epoch milliseconds")


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with username and password. Sets the session cookie on success.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "New password rejected"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        409: {"model": ErrorResponse, "description": "Password change required"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, cookies: CookiesDep, response: Response) -> LoginResponse:
    username = await app.login(
        login_data.username, login_data.password, login_data.new_password, login_data.confirm_password
    )
    cookies.issue(response, username)
    redirect_to = sanitize_redirect(login_data.redirect_to, app.config.protected_prefix)
    return LoginResponse(username=username, redirect_to=redirect_to)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Clear the session cookie.",
    operation_id="logout",
    status_code=204,
    responses={204: {"description": "Session cookie cleared"}},
)
async def logout(cookies: CookiesDep, response: Response) -> None:
    cookies.clear(response)


@router.get(
    "/auth/session",
    summary="Current session",
    description="Return the claims of the current session cookie.",
    operation_id="getSession",
    responses={
        200: {"description": "Session is valid"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_session(session: SessionDep) -> SessionView:
    return SessionView(username=session.username, expires_at=session.expires_at)
