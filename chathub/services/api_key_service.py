import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from chathub.db.api_key_repo import ApiKeyRepo
from chathub.models.api_key import ApiKey


KEY_PREFIX = "chathub_"


class ApiKeyInUseError(Exception):
    """Raised when a caller tries to revoke the key authenticating the request"""
    pass


@dataclass
class IssuedApiKey:
    api_key: ApiKey
    plaintext_key: str


def hash_key(plaintext_key: str) -> str:
    return hashlib.sha256(plaintext_key.encode()).hexdigest()


class ApiKeyService:
    def __init__(self, api_key_repo: ApiKeyRepo) -> None:
        self.api_key_repo = api_key_repo

    def issue(self, user_id: str, name: str, plaintext_key: str | None = None) -> IssuedApiKey:
        """Store a new key for the user; a random one is generated unless given"""
        plaintext_key = plaintext_key or f"{KEY_PREFIX}{secrets.token_urlsafe(32)}"
        api_key = self.api_key_repo.insert(ApiKey(
            id=str(uuid.uuid4()),
            user_id=user_id,
            key_hash=hash_key(plaintext_key),
            name=name,
            created_at=datetime.now(timezone.utc),
        ))
        return IssuedApiKey(api_key=api_key, plaintext_key=plaintext_key)

    def find(self, plaintext_key: str) -> ApiKey | None:
        return self.api_key_repo.find_by_hash(hash_key(plaintext_key))

    def authenticate(self, plaintext_key: str) -> tuple[ApiKey | None, str | None]:
        """Return the active key, or None with the reason it was refused"""
        api_key = self.find(plaintext_key)
        if api_key is None:
            return None, "Invalid API key"
        if not api_key.is_active:
            return None, "API key has been revoked"
        return api_key, None

    def list_for_user(self, user_id: str, include_revoked: bool = False) -> list[ApiKey]:
        return self.api_key_repo.list_for_user(user_id, include_revoked)

    def revoke(self, key_id: str, user_id: str, current_key_id: str) -> ApiKey | None:
        """
        Revoke one of the user's keys.

        Returns None when the key does not exist or belongs to someone else.
        Revoking an already revoked key is a no-op.
        """
        if key_id == current_key_id:
            raise ApiKeyInUseError(key_id)

        api_key = self.api_key_repo.find_by_id(key_id)
        if api_key is None or api_key.user_id != user_id:
            return None

        if api_key.is_active:
            self.api_key_repo.revoke(key_id)
        return api_key
