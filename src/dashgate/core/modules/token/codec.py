"""URL-safe encoding of session claims and the two-segment token layout.

Wire format: ``base64url(claims JSON).base64url(signature)``. Both segments use
the URL-safe alphabet with ``=`` padding stripped. The JSON form is compact with
a fixed field order so every runtime produces the same bytes for the same claims.
"""

import base64
import binascii
import json
import re

from pydantic import ValidationError as PydanticValidationError

from dashgate.core.modules.token.models import SessionClaims
from dashgate.errors import MalformedTokenError

TOKEN_SEPARATOR = "."

_B64URL_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode unpadded URL-safe base64, rejecting anything outside the alphabet."""
    if not _B64URL_RE.fullmatch(value) or len(value) % 4 == 1:
        raise MalformedTokenError("Invalid base64url segment")
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except binascii.Error as e:
        raise MalformedTokenError("Invalid base64url segment") from e


def claims_to_json(claims: SessionClaims) -> bytes:
    payload = {"username": claims.username, "exp": claims.expires_at}
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_claims(claims: SessionClaims) -> str:
    return b64url_encode(claims_to_json(claims))


def decode_claims(encoded: str) -> SessionClaims:
    """Decode the claims segment.

    Raises:
        MalformedTokenError: For any input that is not a base64url encoded claims object.
    """
    raw = b64url_decode(encoded)
    try:
        return SessionClaims.model_validate_json(raw, by_name=False)
    except PydanticValidationError as e:
        raise MalformedTokenError("Invalid claims payload") from e


def split_token(token: str) -> tuple[str, str]:
    """Split a signed token into its claims and signature segments."""
    parts = token.split(TOKEN_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedTokenError("Token must have exactly two non-empty segments")
    return parts[0], parts[1]


def join_token(encoded_claims: str, signature: str) -> str:
    return f"{encoded_claims}{TOKEN_SEPARATOR}{signature}"
