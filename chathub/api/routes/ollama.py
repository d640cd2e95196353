from typing import AsyncGenerator

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from chathub.api.dependencies import (
    AdminContextDep,
    AuthContextDep,
    GenerationServiceDep,
    GenerationStreamServiceDep,
)
from chathub.events.stream_event import StreamEvent
from chathub.models.generation.requests import EmbeddingsRequest, GenerateRequest, PullModelRequest
from chathub.models.generation.responses import (
    CheckModelResponse,
    DeleteModelResponse,
    EmbeddingsResponse,
    GenerateResponse,
    ModelListResponse,
    StatusResponse,
)

router = APIRouter(
    prefix="/api/ollama",
    tags=["ollama"],
)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def _ndjson_response(events: AsyncGenerator[StreamEvent, None]) -> StreamingResponse:
    async def body() -> AsyncGenerator[str, None]:
        async for event in events:
            yield event.format_ndjson()

    return StreamingResponse(
        body(),
        media_type=NDJSON_MEDIA_TYPE,
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable buffering in nginx
        },
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(generation_service: GenerationServiceDep) -> StatusResponse:
    """Probe the inference service. Connectivity problems are reported, not raised."""
    status = await generation_service.test_connection()
    return StatusResponse(**status.to_dict())


@router.get("/models", response_model=ModelListResponse)
async def list_models(generation_service: GenerationServiceDep) -> ModelListResponse:
    models = await generation_service.get_available_models()
    return ModelListResponse(success=True, models=[m.to_dict() for m in models])


@router.post("/generate", response_model=None)
async def generate(
    request_body: GenerateRequest,
    generation_service: GenerationServiceDep,
    stream_service: GenerationStreamServiceDep,
) -> GenerateResponse | StreamingResponse:
    """
    Generate a completion.

    With `stream: true` the response is NDJSON: one `chunk` line per
    fragment followed by a `done` line, or an `error` line if generation
    fails after the stream has started.
    """
    options = generation_service.resolve_options(
        model=request_body.model,
        system=request_body.system,
        context=request_body.context,
        temperature=request_body.temperature,
        top_p=request_body.top_p,
        top_k=request_body.top_k,
    )

    if request_body.stream:
        return _ndjson_response(stream_service.stream_generation(request_body.prompt, options))

    result = await generation_service.generate_response(request_body.prompt, options)
    return GenerateResponse(**result.to_dict())


@router.post("/embeddings", response_model=EmbeddingsResponse)
async def create_embeddings(
    request_body: EmbeddingsRequest,
    context: AuthContextDep,
    generation_service: GenerationServiceDep,
) -> EmbeddingsResponse:
    result = await generation_service.generate_embeddings(request_body.text, request_body.model)
    return EmbeddingsResponse(success=True, embeddings=result.embeddings, model=result.model)


@router.post("/pull")
async def pull_model(
    request_body: PullModelRequest,
    context: AdminContextDep,
    stream_service: GenerationStreamServiceDep,
) -> StreamingResponse:
    """
    Download a model. Admin only.

    Streams every progress payload as a `progress` line and finishes with a
    `result` line. When the upstream closes without confirming success the
    result carries `status: completed_unconfirmed` and a `verified` flag.
    """
    return _ndjson_response(stream_service.stream_pull(request_body.model))


@router.delete("/models/{model_name:path}", response_model=DeleteModelResponse)
async def delete_model(
    model_name: str,
    context: AdminContextDep,
    generation_service: GenerationServiceDep,
) -> DeleteModelResponse:
    message = await generation_service.delete_model(model_name)
    return DeleteModelResponse(success=True, message=message)


@router.get("/model/{model_name:path}/check", response_model=CheckModelResponse)
async def check_model(
    model_name: str,
    context: AuthContextDep,
    generation_service: GenerationServiceDep,
) -> CheckModelResponse:
    available = await generation_service.is_model_available(model_name)
    return CheckModelResponse(success=True, model=model_name, available=available)
