import uuid
from dataclasses import dataclass

import structlog

from chathub.db.user_repo import UserRepo
from chathub.models.user.models import User
from chathub.services.api_key_service import ApiKeyService


logger = structlog.get_logger(__name__)

ADMIN_USER_ID = "admin"
ADMIN_EMAIL = "admin@chathub.local"


@dataclass
class RegistrationResult:
    user: User
    plaintext_key: str


class UserService:
    """Service for managing users and their initial API keys"""

    def __init__(self, user_repo: UserRepo, api_key_service: ApiKeyService) -> None:
        self.user_repo = user_repo
        self.api_key_service = api_key_service

    def get_user(self, user_id: str) -> User | None:
        return self.user_repo.get_user_by_id(user_id)

    def register_user(self, name: str, email: str) -> RegistrationResult | None:
        """Create a user with a first API key; returns None when the email is taken"""
        if self.user_repo.get_user_by_email(email) is not None:
            return None

        user = self.user_repo.create_user(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email,
        )
        key = self.api_key_service.issue(user.id, "default")
        logger.info("user_registered", user_id=user.id)

        return RegistrationResult(user=user, plaintext_key=key.plaintext_key)

    def ensure_admin(self, admin_api_key: str) -> User:
        """Seed the admin user and make the configured admin key usable"""
        admin = self.user_repo.get_user_by_id(ADMIN_USER_ID)
        if admin is None:
            admin = self.user_repo.create_user(
                user_id=ADMIN_USER_ID,
                name="Administrator",
                email=ADMIN_EMAIL,
                role="admin",
            )
            logger.info("admin_user_created", user_id=admin.id)

        if admin_api_key and self.api_key_service.find(admin_api_key) is None:
            self.api_key_service.issue(admin.id, "admin", plaintext_key=admin_api_key)
            logger.info("admin_api_key_seeded", user_id=admin.id)

        return admin
