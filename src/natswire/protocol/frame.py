""" Parsing of inbound control lines into :class:`Frame` instances. A frame
    only lives for one parse/dispatch cycle; the payload block that follows
    a MSG line is read separately by the caller, using the declared length.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

from . import fields
from ..errors import ProtocolError


class FrameKind(enum.Enum):
    INFO = fields.INFO
    MSG = fields.MSG
    PING = fields.PING
    PONG = fields.PONG
    OK = fields.OK
    ERR = fields.ERR
    UNKNOWN = None


_kinds = dict()
for _kind in FrameKind:
    if _kind.value is not None:
        _kinds[_kind.value] = _kind


@dataclass(frozen=True)
class Frame:
    """ One parsed control line. Only MSG frames populate *subject*, *sid*,
        *inbox* and *length*; INFO and ERR frames carry the remainder of the
        line in *body*.
    """

    kind: FrameKind
    line: str
    subject: Optional[str] = None
    sid: Optional[str] = None
    inbox: Optional[str] = None
    length: Optional[int] = None
    body: Optional[str] = None


def _as_text(line: Union[bytes, str]) -> str:

    if isinstance(line, (bytes, bytearray)):
        try:
            line = bytes(line).decode('utf-8')
        except UnicodeDecodeError as exc:
            raise ProtocolError('control line is not valid UTF-8') from exc

    return line.rstrip('\r\n')


def is_error_frame(line: Union[bytes, str]) -> bool:
    """ Return True if the broker response *line* is an ``-ERR`` line,
        regardless of what follows the marker.
    """

    if isinstance(line, (bytes, bytearray)):
        return bytes(line[:4]) == fields.ERR.encode()

    return line[:4] == fields.ERR


def validate_subject(subject):
    """ Subjects, queue groups and inboxes are single protocol fields: they
        must be non-empty and cannot contain whitespace.
    """

    if not isinstance(subject, str):
        raise TypeError('subject must be a string, not ' + type(subject).__name__)

    if subject == '':
        raise ValueError('subject cannot be empty')

    for character in subject:
        if character.isspace():
            raise ValueError('subject cannot contain whitespace: ' + repr(subject))


def parse_msg(line: str) -> Frame:
    """ Interpret a MSG control line. The reply inbox is optional and sits
        between the sid and the length, so the only way to tell whether it
        is present is to count the fields:

            MSG <subject> <sid> <length>
            MSG <subject> <sid> <inbox> <length>
    """

    parts = line.split()

    if len(parts) == fields.MSG_FIELDS:
        subject = parts[1]
        sid = parts[2]
        inbox = None
        length = parts[3]
    elif len(parts) == fields.MSG_FIELDS_INBOX:
        subject = parts[1]
        sid = parts[2]
        inbox = parts[3]
        length = parts[4]
    else:
        raise ProtocolError('malformed MSG line (%d fields): %r' % (len(parts), line))

    try:
        length = int(length)
    except ValueError:
        raise ProtocolError('non-numeric MSG length: %r' % (line,)) from None

    if length < 0:
        raise ProtocolError('negative MSG length: %r' % (line,))

    return Frame(FrameKind.MSG, line, subject, sid, inbox, length)


def parse_line(line: Union[bytes, str]) -> Frame:
    """ Classify a control line by its leading token and return the
        corresponding :class:`Frame`. Lines with an unrecognized leading
        token come back as :attr:`FrameKind.UNKNOWN` rather than raising;
        only a recognized frame with bad contents is a :class:`ProtocolError`.
    """

    line = _as_text(line)
    stripped = line.lstrip()

    if stripped == '':
        return Frame(FrameKind.UNKNOWN, line)

    pieces = stripped.split(None, 1)
    token = pieces[0].upper()

    if len(pieces) > 1:
        rest = pieces[1].strip()
    else:
        rest = ''

    try:
        kind = _kinds[token]
    except KeyError:
        return Frame(FrameKind.UNKNOWN, line)

    if kind is FrameKind.MSG:
        return parse_msg(stripped)

    if kind is FrameKind.ERR:
        return Frame(kind, line, body=rest.strip('\'"'))

    if kind is FrameKind.INFO:
        if rest == '':
            raise ProtocolError('INFO line without a body')
        return Frame(kind, line, body=rest)

    return Frame(kind, line)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
