from datetime import datetime

from pydantic import Field

from dashgate.core.db import MongoModel
from dashgate.utils import now


class CredentialRecord(MongoModel):
    """Dashboard account credentials, keyed by username."""

    username: str
    password_hash: str  # bcrypt hash, or legacy unsalted SHA-256 hex digest
    must_change_password: bool = False
    role: str = "dashboard"
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
    password_updated_at: datetime | None = None
    last_login_at: datetime | None = None
