"""HMAC-SHA256 signing of encoded session claims.

The route gate and the request handlers both verify through this module, so
they always agree on whether a token is valid.
"""

import hashlib
import hmac

from dashgate.core.modules.token.codec import b64url_encode


def constant_time_equals(a: str, b: str) -> bool:
    """Compare two strings without exiting early on the first difference.

    Length is not secret, so a length mismatch is rejected up front.
    """
    a_bytes = a.encode("utf-8")
    b_bytes = b.encode("utf-8")
    if len(a_bytes) != len(b_bytes):
        return False
    return hmac.compare_digest(a_bytes, b_bytes)


class TokenSigner:
    """Signs and verifies encoded claims with a shared secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._key = secret.encode("utf-8")

    def __repr__(self) -> str:
        return "TokenSigner(secret=***)"

    def digest(self, encoded_claims: str) -> bytes:
        """Raw HMAC-SHA256 over the UTF-8 bytes of the encoded claims."""
        return hmac.new(self._key, encoded_claims.encode("utf-8"), hashlib.sha256).digest()

    def sign(self, encoded_claims: str) -> str:
        return b64url_encode(self.digest(encoded_claims))

    def verify(self, encoded_claims: str, signature: str) -> bool:
        return constant_time_equals(signature, self.sign(encoded_claims))
