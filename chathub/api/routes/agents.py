from fastapi import APIRouter, HTTPException, status

from chathub.api.dependencies import AgentServiceDep, AuthContextDep
from chathub.models.agent.requests import CreateAgentRequest, UpdateAgentRequest
from chathub.models.agent.responses import AgentListResponse, AgentResponse, DeleteAgentResponse
from chathub.services.agent_service import HubNotFoundError

router = APIRouter(
    prefix="/agents",
    tags=["agents"],
)


def _agent_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Agent not found",
    )


@router.post("", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    request_body: CreateAgentRequest,
    context: AuthContextDep,
    agent_service: AgentServiceDep,
) -> AgentResponse:
    try:
        agent = agent_service.create_agent(context.user_id, request_body)
    except HubNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Hub not found",
        )

    return agent.to_response()


@router.get("", response_model=AgentListResponse)
async def list_agents(
    context: AuthContextDep,
    agent_service: AgentServiceDep,
    hub_id: str | None = None,
) -> AgentListResponse:
    agents = agent_service.list_agents(context.user_id, hub_id)
    return AgentListResponse(agents=[a.to_response() for a in agents])


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: str,
    context: AuthContextDep,
    agent_service: AgentServiceDep,
) -> AgentResponse:
    agent = agent_service.get_agent(agent_id, context.user_id)
    if agent:
        return agent.to_response()

    raise _agent_not_found()


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: str,
    request_body: UpdateAgentRequest,
    context: AuthContextDep,
    agent_service: AgentServiceDep,
) -> AgentResponse:
    agent = agent_service.update_agent(agent_id, context.user_id, request_body)
    if agent:
        return agent.to_response()

    raise _agent_not_found()


@router.delete("/{agent_id}", response_model=DeleteAgentResponse)
async def delete_agent(
    agent_id: str,
    context: AuthContextDep,
    agent_service: AgentServiceDep,
) -> DeleteAgentResponse:
    agent = agent_service.delete_agent(agent_id, context.user_id)
    if agent is None:
        raise _agent_not_found()

    return DeleteAgentResponse(id=agent_id, message=f"Agent '{agent.name}' has been deleted")
