""" The NATS client protocol: frame encoding and parsing, the broker
    greeting, and the message value handed to subscribers. Nothing in this
    package performs I/O; see :mod:`natswire.transport` for that.
"""

from . import fields
from . import frame
from . import wire
from . import info
from . import message

from .frame import Frame, FrameKind, is_error_frame, parse_line
from .info import ServerInfo
from .message import Message

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
