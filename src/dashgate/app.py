from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from dashgate.config import Config
from dashgate.core.core import Core
from dashgate.core.modules.login.models import LoginState
from dashgate.core.modules.token.models import AuthToken, SessionClaims
from dashgate.errors import (
    InvalidCredentialsError,
    PasswordRotationError,
    PasswordRotationRequiredError,
)


class App:
    """Facade for all authentication operations, translates outcomes into user errors."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def login(
        self,
        username: str,
        password: str,
        new_password: str | None = None,
        confirm_password: str | None = None,
    ) -> str:
        """Authenticate and return the username a session should be issued for."""
        outcome = await self._core.services.login.login(username, password, new_password, confirm_password)
        match outcome.state:
            case LoginState.SESSION_ISSUED if outcome.username:
                return outcome.username
            case LoginState.ROTATION_REQUIRED:
                raise PasswordRotationRequiredError(outcome.message)
            case LoginState.ROTATION_INVALID:
                raise PasswordRotationError(outcome.message)
            case _:
                raise InvalidCredentialsError

    def create_session_token(self, username: str) -> AuthToken:
        """Sign a fresh session token for an authenticated user."""
        return self._core.services.session.create_token(username)

    def read_session(self, token: str | None) -> SessionClaims | None:
        """Return claims for a valid session token, None otherwise."""
        return self._core.services.session.verify_token(token)
