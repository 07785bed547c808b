"""Transport layer implementations for serving the dispatcher."""

from .base import BaseTransport, TransportError
from .stdio import BlockingStreamReader, StdioServerTransport

__all__ = ["BaseTransport", "TransportError", "BlockingStreamReader", "StdioServerTransport"]
