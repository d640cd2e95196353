from fastapi import HTTPException, status, Request

from chathub.db.user_repo import UserRepo
from chathub.request_context import RequestContext
from chathub.services.api_key_service import ApiKeyService


class AuthService:
    """Service for handling authentication and creating request contexts"""

    def __init__(self, api_key_service: ApiKeyService, user_repo: UserRepo):
        self.api_key_service = api_key_service
        self.user_repo = user_repo

    def authenticate(self, request: Request) -> RequestContext:
        """
        Authenticate a request and return RequestContext.

        Args:
            request: FastAPI Request object

        Returns:
            RequestContext with user_id, api_key_id and the user's role

        Raises:
            HTTPException: 401 if authentication fails
        """
        api_key = request.headers.get("X-API-Key")
        if not api_key:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing API key",
            )

        validated_key, error = self.api_key_service.authenticate(api_key)
        if validated_key is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=error or "Invalid API key",
            )

        user = self.user_repo.get_user_by_id(validated_key.user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User for API key no longer exists",
            )

        return RequestContext(
            user_id=user.id,
            api_key_id=validated_key.id,
            role=user.role,
        )
