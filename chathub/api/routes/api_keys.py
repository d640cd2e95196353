from fastapi import APIRouter, HTTPException, status

from chathub.api.dependencies import ApiKeyServiceDep, AuthContextDep
from chathub.models.apikey.requests import CreateApiKeyRequest
from chathub.models.apikey.responses import (
    CreateApiKeyResponse,
    ListApiKeysResponse,
    RevokeApiKeyResponse,
)
from chathub.services.api_key_service import ApiKeyInUseError


router = APIRouter(
    prefix="/api-keys",
    tags=["api-keys"],
)


@router.post("", response_model=CreateApiKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_api_key(
    request_body: CreateApiKeyRequest,
    context: AuthContextDep,
    api_key_service: ApiKeyServiceDep,
) -> CreateApiKeyResponse:
    """
    Create another API key for the authenticated user.

    **Warning**: The key is only shown in this response.
    """
    issued = api_key_service.issue(context.user_id, request_body.name)
    return CreateApiKeyResponse(
        id=issued.api_key.id,
        name=issued.api_key.name,
        key=issued.plaintext_key,
        created_at=issued.api_key.created_at,
    )


@router.get("", response_model=ListApiKeysResponse)
async def list_api_keys(
    context: AuthContextDep,
    api_key_service: ApiKeyServiceDep,
    include_revoked: bool = False,
) -> ListApiKeysResponse:
    keys = api_key_service.list_for_user(context.user_id, include_revoked)
    return ListApiKeysResponse(keys=[k.to_response(current_key_id=context.api_key_id) for k in keys])


@router.delete("/{key_id}", response_model=RevokeApiKeyResponse)
async def revoke_api_key(
    key_id: str,
    context: AuthContextDep,
    api_key_service: ApiKeyServiceDep,
) -> RevokeApiKeyResponse:
    """Revoke a key. The key authenticating this request cannot be revoked."""
    try:
        api_key = api_key_service.revoke(key_id, context.user_id, context.api_key_id)
    except ApiKeyInUseError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Cannot revoke the API key currently being used for authentication",
        )

    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="API key not found",
        )

    return RevokeApiKeyResponse(id=key_id, message=f"API key '{api_key.name}' has been revoked")
