from dataclasses import dataclass
from datetime import datetime

from chathub.models.apikey.responses import ApiKeyResponse


@dataclass
class ApiKey:
    id: str
    user_id: str
    key_hash: str
    name: str
    created_at: datetime
    revoked_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None

    def to_response(self, current_key_id: str | None = None) -> ApiKeyResponse:
        return ApiKeyResponse(
            id=self.id,
            name=self.name,
            created_at=self.created_at,
            revoked_at=self.revoked_at,
            in_use=self.id == current_key_id,
        )
