""" The broker greeting. A :class:`ServerInfo` is parsed once per successful
    handshake and replaced wholesale on every reconnect; it is never updated
    in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from . import fields
from .frame import FrameKind, parse_line
from .. import json
from ..errors import HandshakeError, ProtocolError


@dataclass(frozen=True)
class ServerInfo:
    server_id: str
    tls_required: bool = False
    host: Optional[str] = None
    port: Optional[int] = None
    version: Optional[str] = None
    go: Optional[str] = None
    auth_required: bool = False
    tls_verify: bool = False
    max_payload: Optional[int] = None
    connect_urls: Tuple[str, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


    @classmethod
    def from_dict(cls, info: Dict[str, Any]) -> ServerInfo:

        try:
            server_id = info['server_id']
        except KeyError:
            raise HandshakeError('INFO is missing server_id') from None

        urls = info.get('connect_urls') or ()

        return cls(
            server_id=server_id,
            tls_required=bool(info.get('tls_required', False)),
            host=info.get('host'),
            port=info.get('port'),
            version=info.get('version'),
            go=info.get('go'),
            auth_required=bool(info.get('auth_required', False)),
            tls_verify=bool(info.get('tls_verify', False)),
            max_payload=info.get('max_payload'),
            connect_urls=tuple(urls),
            raw=dict(info),
        )


    @classmethod
    def parse(cls, line) -> ServerInfo:
        """ Parse a complete ``INFO {...}`` line as received from the broker.
            Anything else, including a well-formed frame of another kind,
            is a :class:`HandshakeError`.
        """

        try:
            frame = parse_line(line)
        except ProtocolError as exc:
            raise HandshakeError('unreadable greeting: ' + str(exc)) from exc

        if frame.kind is not FrameKind.INFO:
            raise HandshakeError('expected %s greeting, got %r' % (fields.INFO, frame.line))

        try:
            info = json.loads(frame.body)
        except json.DecodeError as exc:
            raise HandshakeError('INFO body is not valid JSON') from exc

        if not isinstance(info, dict):
            raise HandshakeError('INFO body must be a JSON object')

        return cls.from_dict(info)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
