from fastapi import APIRouter, HTTPException, status

from chathub.api.dependencies import AuthContextDep, UserServiceDep
from chathub.models.user.requests import RegisterUserRequest
from chathub.models.user.responses import RegisterUserResponse, UserResponse

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.post("/register", response_model=RegisterUserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request_body: RegisterUserRequest,
    user_service: UserServiceDep,
) -> RegisterUserResponse:
    """
    Register a new user.

    **Warning**: The returned API key is only shown once. Save it securely.
    """
    result = user_service.register_user(request_body.name, request_body.email)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        )

    return RegisterUserResponse(user=result.user.to_response(), api_key=result.plaintext_key)


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    context: AuthContextDep,
    user_service: UserServiceDep,
) -> UserResponse:
    user = user_service.get_user(context.user_id)
    if user:
        return user.to_response()

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="User not found",
    )
