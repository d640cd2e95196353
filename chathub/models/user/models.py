from dataclasses import dataclass
from datetime import datetime

from chathub.models.user.responses import UserResponse


@dataclass
class User:
    id: str
    name: str
    email: str
    role: str
    created_at: datetime

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            created_at=self.created_at,
        )
