"""Session token models."""

from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

AuthToken = NewType("AuthToken", str)


class SessionClaims(BaseModel):
    """Signed session payload: who is authenticated and until when.

    Decoding is strict: missing fields, extra fields and loosely typed values
    are rejected instead of partially trusted.
    """

    username: str = Field(..., min_length=1, description="Authenticated principal")
    expires_at: int = Field(..., alias="exp", description="Expiry deadline, epoch milliseconds")

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        frozen=True,
        validate_by_name=True,
    )
