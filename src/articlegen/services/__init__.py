from .generation import GenerationClient
from .http import HttpResponse, TransportError, request_json
from .research import ResearchClient

__all__ = [
    "GenerationClient",
    "HttpResponse",
    "ResearchClient",
    "TransportError",
    "request_json",
]
