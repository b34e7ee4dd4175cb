"""Infrastructure layer exports."""

from .dectool import DecToolClient
from .output import OutputChannel, OutputLine
from .registry import ProcessingRegistry
from .transport import DecToolTransport, TransportResponse

__all__ = [
    "DecToolClient",
    "DecToolTransport",
    "OutputChannel",
    "OutputLine",
    "ProcessingRegistry",
    "TransportResponse",
]
