from dataclasses import dataclass


@dataclass
class RequestContext:
    """Request-scoped context containing the authenticated user"""
    user_id: str
    api_key_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
