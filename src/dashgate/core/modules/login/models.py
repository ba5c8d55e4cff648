from enum import StrEnum

from pydantic import BaseModel


class LoginState(StrEnum):
    """States of a single login attempt."""

    AWAITING_CREDENTIALS = "awaiting_credentials"
    VALIDATING_PASSWORD = "validating_password"
    ROTATION_REQUIRED = "rotation_required"
    ROTATION_INVALID = "rotation_invalid"
    SESSION_ISSUED = "session_issued"
    REJECTED = "rejected"


class LoginOutcome(BaseModel):
    """Terminal result of a login attempt.

    username is the normalized document key and is only set once the
    password has been verified.
    """

    state: LoginState
    message: str
    username: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == LoginState.SESSION_ISSUED
