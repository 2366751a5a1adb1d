"""TCP transport, optionally upgraded to TLS after the broker greeting."""

from __future__ import annotations

import logging
import socket
import ssl
from typing import Optional

from ..errors import ProtocolError, TLSNegotiationError, TransportError, TransportTimeout
from .base import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_LINE, Transport

logger = logging.getLogger(__name__)


class TcpTransport(Transport):
    """Blocking socket transport.

    Reads go through a buffered file object so that a control line and the
    payload block following it can be consumed without re-assembling
    partial ``recv()`` results by hand. The file object is rebuilt whenever
    the socket underneath it changes (TLS upgrade).

    The read buffer is sized to ``chunk_size`` when the socket is attached,
    so each ``recv()`` asks the socket for at most that many bytes.
    Changing ``chunk_size`` later bounds the payload reads from the buffer,
    but the buffer itself keeps its size until the next attach.
    """

    def __init__(self, host: str, port: int, *, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 max_line: int = DEFAULT_MAX_LINE, debug: bool = False):
        self.host = host
        self.port = int(port)
        self.chunk_size = int(chunk_size)
        self.max_line = int(max_line)
        self.debug = debug

        self._socket: Optional[socket.socket] = None
        self._reader = None


    @classmethod
    def from_socket(cls, sock: socket.socket, **kwargs) -> TcpTransport:
        """Adopt an already connected socket."""

        try:
            host, port = sock.getpeername()[:2]
        except (OSError, TypeError, ValueError):
            host, port = 'localhost', 0

        transport = cls(host, port, **kwargs)
        transport._attach(sock)
        return transport


    def _attach(self, sock: socket.socket) -> None:
        self._socket = sock
        self._reader = sock.makefile('rb', buffering=self.chunk_size)


    @property
    def is_open(self) -> bool:
        return self._socket is not None


    def open(self, timeout: Optional[float] = None) -> None:

        if self._socket is not None:
            return

        try:
            sock = socket.create_connection((self.host, self.port), timeout)
        except socket.timeout as exc:
            raise TransportTimeout(f"connect to {self.host}:{self.port} timed out") from exc
        except OSError as exc:
            raise TransportError(f"cannot connect to {self.host}:{self.port}: {exc}") from exc

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._attach(sock)


    def close(self) -> None:

        sock = self._socket
        if sock is None:
            return

        reader = self._reader
        self._socket = None
        self._reader = None

        try:
            if reader is not None:
                reader.close()
        finally:
            sock.close()


    def set_timeout(self, timeout: Optional[float]) -> bool:

        if self._socket is None:
            return False

        self._socket.settimeout(timeout)
        return True


    def _require_open(self) -> socket.socket:
        if self._socket is None:
            raise TransportError("transport is not open")
        return self._socket


    def send(self, data: bytes) -> None:

        sock = self._require_open()
        view = memoryview(data)

        while len(view) > 0:
            try:
                written = sock.send(view)
            except socket.timeout as exc:
                raise TransportTimeout("send timed out") from exc
            except OSError as exc:
                raise TransportError(f"error sending data: {exc}") from exc

            if written == 0:
                raise TransportError("broken pipe or closed connection")

            view = view[written:]

        if self.debug:
            logger.debug("->> %r", bytes(data))


    def receive_line(self) -> bytes:

        self._require_open()

        try:
            line = self._reader.readline(self.max_line)
        except socket.timeout as exc:
            raise TransportTimeout("read timed out") from exc
        except OSError as exc:
            raise TransportError(f"error reading data: {exc}") from exc

        if len(line) >= self.max_line and not line.endswith(b"\n"):
            raise ProtocolError(f"control line exceeds {self.max_line} bytes")

        if self.debug:
            logger.debug("<<- %r", line)

        return line


    def receive_exact(self, length: int) -> bytes:

        self._require_open()
        received = bytearray()

        while len(received) < length:
            chunk_size = min(self.chunk_size, length - len(received))

            try:
                chunk = self._reader.read(chunk_size)
            except socket.timeout as exc:
                raise TransportTimeout("read timed out") from exc
            except OSError as exc:
                raise TransportError(f"error reading data: {exc}") from exc

            if not chunk:
                raise TransportError(
                    f"stream closed after {len(received)} of {length} payload bytes"
                )

            received += chunk

        if self.debug:
            logger.debug("<<- %d payload bytes", length)

        return bytes(received)


    def upgrade_to_tls(self, context=None, server_hostname: Optional[str] = None) -> None:

        sock = self._require_open()

        if context is None:
            context = ssl.create_default_context()

        if server_hostname is None:
            server_hostname = self.host

        timeout = sock.gettimeout()

        # The plaintext reader must not be used again once the handshake
        # starts; drop it before wrapping.
        self._reader.close()
        self._reader = None

        try:
            secure = context.wrap_socket(sock, server_hostname=server_hostname)
        except (ssl.SSLError, OSError, ValueError) as exc:
            self._socket = None
            sock.close()
            raise TLSNegotiationError(f"error negotiating TLS with {self.host}:{self.port}: {exc}") from exc

        secure.settimeout(timeout)
        self._attach(secure)


    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<TcpTransport {self.host}:{self.port} {state}>"
