from datetime import datetime, timezone
from uuid import uuid4

from chathub.db.agent_repo import AgentRepo
from chathub.models.agent.models import Agent
from chathub.models.agent.requests import CreateAgentRequest, UpdateAgentRequest
from chathub.services.hub_service import HubService


class HubNotFoundError(Exception):
    """Raised when an agent or chat refers to a hub the user does not own"""
    pass


class AgentService:
    def __init__(self, agent_repo: AgentRepo, hub_service: HubService) -> None:
        self._agent_repo = agent_repo
        self._hub_service = hub_service

    def create_agent(self, user_id: str, request: CreateAgentRequest) -> Agent:
        if request.hub_id is not None and self._hub_service.get_hub(request.hub_id, user_id) is None:
            raise HubNotFoundError(request.hub_id)

        now = datetime.now(timezone.utc)
        return self._agent_repo.create_agent(Agent(
            id=str(uuid4()),
            user_id=user_id,
            hub_id=request.hub_id,
            name=request.name,
            description=request.description,
            system_prompt=request.system_prompt,
            model=request.model,
            temperature=request.temperature,
            personality_type=request.personality_type,
            tone=request.tone,
            status="active",
            created_at=now,
            updated_at=now,
            traits=request.traits,
            expertise=request.expertise,
            examples=request.examples,
        ))

    def get_agent(self, agent_id: str, user_id: str) -> Agent | None:
        agent = self._agent_repo.get_agent_by_id(agent_id)
        if agent is None or agent.user_id != user_id:
            return None
        return agent

    def find_agent(self, agent_id: str) -> Agent | None:
        """Look up an agent regardless of owner; deleted agents are not found"""
        return self._agent_repo.get_agent_by_id(agent_id)

    def list_agents(self, user_id: str, hub_id: str | None = None) -> list[Agent]:
        return self._agent_repo.list_agents_by_user(user_id, hub_id)

    def update_agent(self, agent_id: str, user_id: str, request: UpdateAgentRequest) -> Agent | None:
        if self.get_agent(agent_id, user_id) is None:
            return None

        self._agent_repo.update_agent(agent_id, request.model_dump(exclude_unset=True, exclude_none=True))
        return self.get_agent(agent_id, user_id)

    def delete_agent(self, agent_id: str, user_id: str) -> Agent | None:
        agent = self.get_agent(agent_id, user_id)
        if agent is None:
            return None

        self._agent_repo.soft_delete_agent(agent_id)
        return agent
