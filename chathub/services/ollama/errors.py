class GenerationError(Exception):
    """Base class for failures surfaced by the generation core"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ModelUnavailableError(GenerationError):
    """Raised before a generation call when the requested model is not installed"""

    def __init__(self, model: str) -> None:
        super().__init__(f"Model {model} is not available")
        self.model = model


class TransportFailureError(GenerationError):
    """Raised when the inference service cannot be reached or times out"""
    pass


class UpstreamProtocolError(GenerationError):
    """Raised when the inference service answers with something we cannot use"""
    pass


class PermissionDeniedError(GenerationError):
    """Raised when a caller without an elevated role requests model management"""
    pass
