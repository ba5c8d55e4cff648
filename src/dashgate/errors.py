from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Raised when a username/password pair is rejected.

    Subclasses exist for operator logs only. They all carry the same
    message so a caller cannot tell an unknown user from a wrong password.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UnknownPrincipalError(InvalidCredentialsError):
    """No credential record exists for the username."""


class WrongPasswordError(InvalidCredentialsError):
    """The password does not match the stored digest."""


class PasswordRotationRequiredError(UserError):
    """Raised when the account must set a new password before a session is issued."""

    def __init__(self, message: str = "A new password must be set before signing in") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class PasswordRotationError(ValidationError):
    """Raised when a new password is too weak or does not match its confirmation."""


class TokenError(Exception):
    """Base class for session token failures.

    Never shown to users: every token failure collapses to "no session".
    """


class MalformedTokenError(TokenError):
    """Token has the wrong shape, bad base64, or bad claims JSON."""


class InvalidSignatureError(TokenError):
    """Token signature does not match the encoded claims."""


class TokenExpiredError(TokenError):
    """Token signature is valid but the expiry deadline has passed."""
