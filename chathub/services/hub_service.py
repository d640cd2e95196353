from uuid import uuid4

from chathub.db.hub_repo import HubRepo
from chathub.models.hub.models import Hub
from chathub.models.hub.requests import CreateHubRequest, UpdateHubRequest


class HubService:
    def __init__(self, hub_repo: HubRepo) -> None:
        self._hub_repo = hub_repo

    def create_hub(self, user_id: str, request: CreateHubRequest) -> Hub:
        return self._hub_repo.create_hub(
            hub_id=str(uuid4()),
            user_id=user_id,
            name=request.name,
            description=request.description,
            icon=request.icon,
            color=request.color,
            category=request.category,
            default_model=request.default_model,
            default_temperature=request.default_temperature,
        )

    def get_hub(self, hub_id: str, user_id: str) -> Hub | None:
        """Get a hub only if it belongs to the user"""
        hub = self._hub_repo.get_hub_by_id(hub_id)
        if hub is None or hub.user_id != user_id:
            return None
        return hub

    def list_hubs(self, user_id: str, status: str | None = "active") -> list[Hub]:
        return self._hub_repo.list_hubs_by_user(user_id, status)

    def update_hub(self, hub_id: str, user_id: str, request: UpdateHubRequest) -> Hub | None:
        if self.get_hub(hub_id, user_id) is None:
            return None

        self._hub_repo.update_hub(hub_id, request.model_dump(exclude_unset=True, exclude_none=True))
        return self.get_hub(hub_id, user_id)

    def delete_hub(self, hub_id: str, user_id: str) -> Hub | None:
        hub = self.get_hub(hub_id, user_id)
        if hub is None:
            return None

        self._hub_repo.soft_delete_hub(hub_id)
        return hub
