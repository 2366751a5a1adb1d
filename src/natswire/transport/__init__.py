"""Transport layer implementations."""

from .base import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_LINE, Transport
from .tcp import TcpTransport
