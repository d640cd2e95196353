from chathub.events.stream_event import StreamEvent
from chathub.services.ollama.ollama_types import ChunkRecord, PullProgressEvent, PullResult


generation_chunk_event_type = "chunk"
generation_done_event_type = "done"
generation_error_event_type = "error"
pull_progress_event_type = "progress"
pull_result_event_type = "result"


def generation_chunk(record: ChunkRecord) -> StreamEvent:
    """Create an event carrying one response fragment."""
    return StreamEvent(
        event_type=generation_chunk_event_type,
        content={
            "content": record.response,
            "done": record.done,
        },
    )


def generation_done() -> StreamEvent:
    """Create the event that terminates a successful generation stream."""
    return StreamEvent(event_type=generation_done_event_type, content={})


def generation_error(message: str) -> StreamEvent:
    """Create the event that terminates a failed generation stream."""
    return StreamEvent(
        event_type=generation_error_event_type,
        content={"message": message},
    )


def pull_progress(event: PullProgressEvent) -> StreamEvent:
    content = dict(event.raw)
    percentage = event.percentage
    if percentage is not None:
        content["percentage"] = percentage
    return StreamEvent(event_type=pull_progress_event_type, content=content)


def pull_finished(result: PullResult, verified: bool | None = None) -> StreamEvent:
    content = {
        "success": True,
        "status": result.outcome.value,
        "message": result.message,
        "model": result.model,
    }
    if verified is not None:
        content["verified"] = verified
    return StreamEvent(event_type=pull_result_event_type, content=content)


def pull_failed(model: str, error: str) -> StreamEvent:
    return StreamEvent(
        event_type=pull_result_event_type,
        content={
            "success": False,
            "message": f"Failed to pull model {model}",
            "model": model,
            "error": error,
        },
    )
