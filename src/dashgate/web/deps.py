from typing import Annotated, cast

from fastapi import Depends, Request

from dashgate.app import App
from dashgate.core.modules.token.models import SessionClaims
from dashgate.errors import AuthenticationError
from dashgate.web.cookies import SessionCookieManager


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_cookies(request: Request) -> SessionCookieManager:
    return cast(SessionCookieManager, request.app.state.cookies)


async def get_session(
    request: Request,
    cookies: Annotated[SessionCookieManager, Depends(get_cookies)],
) -> SessionClaims:
    """Re-validate the session cookie inside the request handler."""
    claims = cookies.read(request.cookies)
    if claims is None:
        raise AuthenticationError("Invalid or expired session")
    return claims


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CookiesDep = Annotated[SessionCookieManager, Depends(get_cookies)]
SessionDep = Annotated[SessionClaims, Depends(get_session)]
