"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`natswire.protocol` so the protocol remains free of
any I/O; the connection only ever talks to a :class:`Transport`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

DEFAULT_CHUNK_SIZE = 1500
DEFAULT_MAX_LINE = 65536


class Transport(ABC):
    """Minimal contract for a byte-stream transport."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_line: int = DEFAULT_MAX_LINE
    debug: bool = False

    @abstractmethod
    def open(self, timeout: Optional[float] = None) -> None:
        """Establish the underlying connection/socket."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection/socket. Idempotent."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Write all of *data*, or raise TransportError."""

    @abstractmethod
    def receive_line(self) -> bytes:
        """Read through the next CRLF. Returns b'' at end of stream; a line
        longer than :attr:`max_line` raises ProtocolError."""

    @abstractmethod
    def receive_exact(self, length: int) -> bytes:
        """Read exactly *length* bytes, never more."""

    @abstractmethod
    def upgrade_to_tls(self, context, server_hostname: Optional[str] = None) -> None:
        """Encrypt the established stream in place."""

    @abstractmethod
    def set_timeout(self, timeout: Optional[float]) -> bool:
        """Apply a read/write timeout; False if the transport is not open."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False
