from typing import AsyncGenerator

import structlog

from chathub.events.generation_events import (
    generation_chunk,
    generation_done,
    generation_error,
    pull_failed,
    pull_finished,
    pull_progress,
)
from chathub.events.stream_event import StreamEvent
from chathub.services.generation_service import GenerationService
from chathub.services.ollama.errors import GenerationError
from chathub.services.ollama.ollama_types import GenerationOptions, PullOutcome


logger = structlog.get_logger(__name__)


class GenerationStreamService:
    """Turns generation and pull streams into client-facing NDJSON events"""

    def __init__(self, generation_service: GenerationService) -> None:
        self._generation_service = generation_service

    async def stream_generation(
        self,
        prompt: str,
        options: GenerationOptions,
    ) -> AsyncGenerator[StreamEvent, None]:
        try:
            async for record in self._generation_service.stream_response(prompt, options):
                if record.response:
                    yield generation_chunk(record)
        except GenerationError as e:
            logger.warning("generation_stream_failed", model=options.model, error=e.message)
            yield generation_error(e.message)
            return

        yield generation_done()

    async def stream_pull(self, model: str) -> AsyncGenerator[StreamEvent, None]:
        stream = self._generation_service.stream_pull(model)
        try:
            async for event in stream:
                yield pull_progress(event)
        except GenerationError as e:
            logger.warning("ollama_pull_failed", model=model, error=e.message)
            yield pull_failed(model, e.message)
            return

        result = stream.final_result()

        verified = None
        if result.outcome == PullOutcome.COMPLETED_UNCONFIRMED:
            verified = await self._generation_service.is_model_available(model)

        yield pull_finished(result, verified)
