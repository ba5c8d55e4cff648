from dashgate.core.modules.user.passwords import BCRYPT_MAX_BYTES
from dashgate.errors import PasswordRotationError

MIN_PASSWORD_LENGTH = 8


def validate_new_password(new_password: str, confirm_password: str | None) -> None:
    """Validate a replacement password.

    Requirements:
    - Minimum length of 8 characters
    - At most 72 bytes once UTF-8 encoded (bcrypt input limit)
    - Matches the confirmation

    Raises:
        PasswordRotationError: If the password doesn't meet requirements
    """
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise PasswordRotationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if len(new_password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise PasswordRotationError(f"New password must be at most {BCRYPT_MAX_BYTES} bytes long")

    if new_password != confirm_password:
        raise PasswordRotationError("Passwords do not match")
