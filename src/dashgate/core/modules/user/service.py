from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from pymongo.asynchronous.database import AsyncDatabase

from dashgate.config import Config
from dashgate.core.core import Service
from dashgate.core.modules.user.models import CredentialRecord
from dashgate.core.modules.user.passwords import hash_password, is_legacy_hash
from dashgate.utils import now

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Dashboard credential store.

    Reads go straight to MongoDB. Only the bootstrap inserts, through
    ``$setOnInsert``. Later writes are field-level ``$set`` updates on an
    existing record, so concurrent logins for one account merge instead of
    overwriting each other.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]], config: Config) -> None:
        super().__init__(database, config)
        self._collection = database.get_collection("dashboard_users")

    def normalize_username(self, username: str) -> str:
        """Map login input to a document key.

        The default account matches case-insensitively, other usernames are used as typed.
        """
        key = username.strip()
        if key.lower() == self.config.default_username.lower():
            return self.config.default_username
        return key

    async def get_credentials(self, username: str) -> CredentialRecord | None:
        """Get credential record by document key.

        A stored document that is not a complete record counts as missing.
        """
        doc = await self._collection.find_one({"_id": username})
        if doc is None:
            return None
        try:
            return CredentialRecord.model_validate(doc)
        except PydanticValidationError:
            logger.warning("invalid_credential_record", username=username)
            return None

    async def ensure_default_user(self) -> None:
        """Create the default account with a forced password change if it does not exist.

        Safe to call on every login, an existing record is left untouched.
        """
        username = self.config.default_username
        if await self._collection.find_one({"_id": username}, projection={"_id": 1}) is not None:
            return

        # Concurrent bootstraps both reach here; $setOnInsert lets only one write land
        record = CredentialRecord(
            id=username,
            username=username,
            password_hash=hash_password(self.config.default_password),
            must_change_password=True,
        )
        result = await self._collection.update_one(
            {"_id": username},
            {"$setOnInsert": record.to_mongo()},
            upsert=True,
        )
        if result.upserted_id is not None:
            logger.info("default_user_created", username=username)

    async def rotate_password(self, username: str, new_password: str) -> None:
        """Store a new password digest and clear the forced change flag."""
        timestamp = now()
        await self._collection.update_one(
            {"_id": username},
            {
                "$set": {
                    "password_hash": hash_password(new_password),
                    "must_change_password": False,
                    "password_updated_at": timestamp,
                    "last_login_at": timestamp,
                    "updated_at": timestamp,
                }
            },
        )
        logger.info("password_rotated", username=username)

    async def record_login(self, record: CredentialRecord, password: str) -> None:
        """Update last login time, upgrading a legacy digest to bcrypt."""
        timestamp = now()
        changes: dict[str, Any] = {"must_change_password": False, "last_login_at": timestamp, "updated_at": timestamp}
        if is_legacy_hash(record.password_hash):
            changes["password_hash"] = hash_password(password)
            changes["password_updated_at"] = timestamp
            logger.info("password_hash_upgraded", username=record.id)
        await self._collection.update_one({"_id": record.id}, {"$set": changes})

    async def on_start(self) -> None:
        """Bootstrap the default account."""
        await self.ensure_default_user()
        logger.debug("user_service_started", default_username=self.config.default_username)
