""" Python client for the NATS publish/subscribe protocol. A single
    :class:`Connection` talks to one broker over TCP, optionally upgraded to
    TLS, and offers synchronous publish, subscribe, request/reply, and a
    blocking :func:`Connection.wait` loop that dispatches inbound messages to
    subscription callbacks.
"""

__version__ = '0.9.0'

# Utility components.

from . import json
from . import errors

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import subscription
from . import encoders

# Primary public-facing interfaces.

from .options import ConnectionOptions
from .connection import Connection, State
from .encoded import EncodedConnection
from .protocol import Message, ServerInfo

from .errors import (
    NatsError,
    TransportError,
    TransportTimeout,
    NotConnectedError,
    ProtocolError,
    UnknownSubscriptionError,
    HandshakeError,
    ConnectError,
    TLSNegotiationError,
    CallbackError,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
