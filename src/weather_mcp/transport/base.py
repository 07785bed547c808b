"""Base transport interface for serving the dispatcher."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class TransportError(ConnectionError):
    """Raised when the transport channel cannot be established or written to."""


class BaseTransport(ABC):
    """Abstract base class for server transports.

    Subclasses own the duplex channel to the client: they read request lines,
    hand them to a RequestDispatcher and write the responses back.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Return whether the transport is currently connected and operational."""
        pass

    @property
    @abstractmethod
    def transport_type(self) -> str:
        """Return a string identifier for this transport type (e.g., 'stdio')."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Attach to the underlying channel.

        Raises:
            TransportError: If the channel cannot be established.
        """
        pass

    @abstractmethod
    async def serve(self) -> None:
        """Read requests and write responses until the channel closes.

        Per-request failures never end the loop.
        """
        pass

    @abstractmethod
    def write_message(self, message: dict) -> None:
        """Write one JSON-RPC message to the client.

        Raises:
            TransportError: If the channel is closed.
        """
        pass
