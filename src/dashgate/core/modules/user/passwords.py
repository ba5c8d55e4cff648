"""Password digests.

Accounts created by earlier deployments store an unsalted SHA-256 hex digest.
Those are still accepted, compared in constant time, and replaced by a bcrypt
hash on the next successful login. Everything written now is bcrypt.
"""

import hashlib
from functools import cache

import bcrypt

from dashgate.core.modules.token.signer import constant_time_equals

BCRYPT_PREFIX = "$2"
BCRYPT_MAX_BYTES = 72


def legacy_digest(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def is_legacy_hash(password_hash: str) -> bool:
    return not password_hash.startswith(BCRYPT_PREFIX)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored digest of either format."""
    if not password_hash:
        return False
    if is_legacy_hash(password_hash):
        return constant_time_equals(legacy_digest(password), password_hash)
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        return False


@cache
def dummy_hash() -> str:
    """Hash to verify against when the username is unknown, so both paths cost the same."""
    return hash_password("dashgate-unknown-principal")
