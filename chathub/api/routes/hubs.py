from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, status

from chathub.api.dependencies import AuthContextDep, HubServiceDep
from chathub.models.hub.requests import CreateHubRequest, UpdateHubRequest
from chathub.models.hub.responses import DeleteHubResponse, HubListResponse, HubResponse

router = APIRouter(
    prefix="/hubs",
    tags=["hubs"],
)


def _hub_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Hub not found",
    )


@router.post("", response_model=HubResponse, status_code=status.HTTP_201_CREATED)
async def create_hub(
    request_body: CreateHubRequest,
    context: AuthContextDep,
    hub_service: HubServiceDep,
) -> HubResponse:
    return hub_service.create_hub(context.user_id, request_body).to_response()


@router.get("", response_model=HubListResponse)
async def list_hubs(
    context: AuthContextDep,
    hub_service: HubServiceDep,
    status_filter: Annotated[Literal["active", "archived"], Query(alias="status")] = "active",
) -> HubListResponse:
    hubs = hub_service.list_hubs(context.user_id, status_filter)
    return HubListResponse(hubs=[h.to_response() for h in hubs])


@router.get("/{hub_id}", response_model=HubResponse)
async def get_hub(
    hub_id: str,
    context: AuthContextDep,
    hub_service: HubServiceDep,
) -> HubResponse:
    hub = hub_service.get_hub(hub_id, context.user_id)
    if hub:
        return hub.to_response()

    raise _hub_not_found()


@router.patch("/{hub_id}", response_model=HubResponse)
async def update_hub(
    hub_id: str,
    request_body: UpdateHubRequest,
    context: AuthContextDep,
    hub_service: HubServiceDep,
) -> HubResponse:
    hub = hub_service.update_hub(hub_id, context.user_id, request_body)
    if hub:
        return hub.to_response()

    raise _hub_not_found()


@router.delete("/{hub_id}", response_model=DeleteHubResponse)
async def delete_hub(
    hub_id: str,
    context: AuthContextDep,
    hub_service: HubServiceDep,
) -> DeleteHubResponse:
    hub = hub_service.delete_hub(hub_id, context.user_id)
    if hub is None:
        raise _hub_not_found()

    return DeleteHubResponse(id=hub_id, message=f"Hub '{hub.name}' has been deleted")
