from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chathub.api.dependencies import Services, build_services
from chathub.api.routes.agents import router as agents_router
from chathub.api.routes.api_keys import router as api_keys_router
from chathub.api.routes.chat import router as chat_router
from chathub.api.routes.health import router as health_router
from chathub.api.routes.hubs import router as hubs_router
from chathub.api.routes.ollama import router as ollama_router
from chathub.api.routes.users import router as users_router
from chathub.logging_config import setup_logging
from chathub.services.ollama.errors import (
    GenerationError,
    ModelUnavailableError,
    PermissionDeniedError,
)
from chathub.settings import Settings, settings


logger = structlog.get_logger(__name__)


def _status_for(error: GenerationError) -> int:
    if isinstance(error, ModelUnavailableError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_502_BAD_GATEWAY


async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.warning(
        "generation_request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
        error=exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": type(exc).__name__,
        },
    )


def create_app(services: Services | None = None, app_settings: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(app_settings.log_level)
        app_services: Services = app.state.services
        app_services.database.setup()
        app_services.user_service.ensure_admin(app_settings.admin_api_key)
        logger.info(
            "application_started",
            environment=app_settings.environment,
            ollama_url=app_settings.ollama_url,
        )
        yield
        await app_services.ollama_client.aclose()
        logger.info("application_stopped")

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Chat hubs, agents and a streaming proxy to a local Ollama server",
        lifespan=lifespan,
    )
    app.state.services = services or build_services(app_settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GenerationError, generation_error_handler)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(api_keys_router)
    app.include_router(hubs_router)
    app.include_router(agents_router)
    app.include_router(chat_router)
    app.include_router(ollama_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
