import structlog

from dashgate.core.core import Service
from dashgate.core.modules.login.models import LoginOutcome, LoginState
from dashgate.core.modules.user.models import CredentialRecord
from dashgate.core.modules.user.passwords import dummy_hash, verify_password
from dashgate.core.modules.user.validators import validate_new_password
from dashgate.errors import (
    InvalidCredentialsError,
    PasswordRotationError,
    PasswordRotationRequiredError,
    UnknownPrincipalError,
    WrongPasswordError,
)

logger = structlog.get_logger(__name__)


class LoginService(Service):
    """Credential check with forced password rotation for the bootstrapped account."""

    async def login(
        self,
        username: str,
        password: str,
        new_password: str | None = None,
        confirm_password: str | None = None,
    ) -> LoginOutcome:
        """Run one login attempt through the state machine.

        The session itself is not issued here: a SESSION_ISSUED outcome tells
        the caller which username to issue it for.
        """
        await self.core.services.user.ensure_default_user()
        key = self.core.services.user.normalize_username(username)
        logger.debug("login_state", state=LoginState.AWAITING_CREDENTIALS, username=key)

        try:
            record = await self._check_password(key, password)
        except InvalidCredentialsError as e:
            logger.info("login_rejected", username=key, reason=type(e).__name__)
            return LoginOutcome(state=LoginState.REJECTED, message=str(e))

        if new_password:
            try:
                validate_new_password(new_password, confirm_password)
            except PasswordRotationError as e:
                logger.info("login_rotation_invalid", username=key)
                return LoginOutcome(state=LoginState.ROTATION_INVALID, message=str(e), username=key)
            await self.core.services.user.rotate_password(key, new_password)
        elif record.must_change_password:
            logger.info("login_rotation_required", username=key)
            return LoginOutcome(
                state=LoginState.ROTATION_REQUIRED, message=str(PasswordRotationRequiredError()), username=key
            )
        else:
            await self.core.services.user.record_login(record, password)

        logger.info("login_succeeded", username=key)
        return LoginOutcome(state=LoginState.SESSION_ISSUED, message="Signed in", username=key)

    async def _check_password(self, key: str, password: str) -> CredentialRecord:
        logger.debug("login_state", state=LoginState.VALIDATING_PASSWORD, username=key)
        record = await self.core.services.user.get_credentials(key) if key else None
        if record is None:
            # Burn the same hashing cost as a real check
            verify_password(password, dummy_hash())
            raise UnknownPrincipalError
        if not password or not verify_password(password, record.password_hash):
            raise WrongPasswordError
        return record
