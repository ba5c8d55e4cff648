"""Session cookie handling.

This is the only module that reads or writes the session cookie.
"""

from collections.abc import Mapping

from starlette.responses import Response

from dashgate.app import App
from dashgate.core.modules.token.models import SessionClaims


class SessionCookieManager:
    """Issues, reads and clears the signed session cookie."""

    def __init__(self, app: App) -> None:
        self._app = app
        self._config = app.config

    @property
    def cookie_name(self) -> str:
        return self._config.session_cookie_name

    def issue(self, response: Response, username: str) -> None:
        """Sign a new token for username and set it on the response."""
        token = self._app.create_session_token(username)
        self._set(response, token, self._config.session_lifetime_seconds)

    def read(self, cookies: Mapping[str, str]) -> SessionClaims | None:
        """Return the session claims, or None if the cookie is absent, tampered or expired."""
        return self._app.read_session(cookies.get(self.cookie_name))

    def clear(self, response: Response) -> None:
        self._set(response, "", 0)

    def _set(self, response: Response, value: str, max_age: int) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=value,
            max_age=max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self._config.secure_cookies,
        )
