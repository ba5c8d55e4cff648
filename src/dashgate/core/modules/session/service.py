from collections.abc import Callable
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from dashgate.config import Config
from dashgate.core.core import Service
from dashgate.core.modules.token.codec import decode_claims, encode_claims, join_token, split_token
from dashgate.core.modules.token.models import AuthToken, SessionClaims
from dashgate.core.modules.token.signer import TokenSigner
from dashgate.errors import InvalidSignatureError, TokenError, TokenExpiredError
from dashgate.utils import now_millis

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues and verifies stateless signed session tokens.

    Nothing is stored server side: a token is valid when its signature matches
    the shared secret and its expiry deadline has not passed.
    """

    def __init__(
        self,
        database: AsyncDatabase[dict[str, Any]],
        config: Config,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        super().__init__(database, config)
        self._signer = TokenSigner(config.session_secret)
        self._lifetime_ms = config.session_lifetime_seconds * 1000
        self._clock = clock

    def create_token(self, username: str) -> AuthToken:
        """Sign claims for username expiring one session lifetime from now."""
        claims = SessionClaims(username=username, expires_at=self._clock() + self._lifetime_ms)
        encoded = encode_claims(claims)
        return AuthToken(join_token(encoded, self._signer.sign(encoded)))

    def decode_token(self, token: str) -> SessionClaims:
        """Verify a token and return its claims.

        The signature is checked before the claims are parsed, so unsigned
        payloads are never interpreted.

        Raises:
            MalformedTokenError: Wrong shape, bad base64 or bad claims JSON.
            InvalidSignatureError: Signature does not match.
            TokenExpiredError: Deadline is in the past.
        """
        encoded, signature = split_token(token)
        if not self._signer.verify(encoded, signature):
            raise InvalidSignatureError("Signature mismatch")
        claims = decode_claims(encoded)
        if claims.expires_at < self._clock():
            raise TokenExpiredError("Session expired")
        return claims

    def verify_token(self, token: str | None) -> SessionClaims | None:
        """Return claims for a valid token, None for anything else."""
        if not token:
            return None
        try:
            return self.decode_token(token)
        except TokenError as e:
            logger.debug("session_token_rejected", reason=type(e).__name__)
            return None
