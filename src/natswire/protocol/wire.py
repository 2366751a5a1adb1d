""" Serialization of outbound control lines. Every encoder here returns the
    complete bytes to hand to :func:`Transport.send`, terminator included.
"""

from . import fields
from .frame import validate_subject
from .. import json


def encode(command, *args):
    """ Return a single CRLF-terminated control line. The *args* are joined
        with single spaces in the order given; any argument that is None is
        left out entirely, which is how optional fields such as the queue
        group or reply inbox are expressed.
    """

    parts = [command]

    for arg in args:
        if arg is None:
            continue

        if isinstance(arg, bytes):
            arg = arg.decode()
        else:
            arg = str(arg)

        parts.append(arg)

    line = ' '.join(parts)
    return line.encode() + fields.CRLF


def payload_bytes(payload):
    """ Normalize a payload to bytes. The declared length in a PUB line is
        always the length of this byte form, never a character count.
    """

    if payload is None:
        return b''

    if isinstance(payload, str):
        return payload.encode('utf-8')

    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)

    raise TypeError('payload must be bytes or str, not ' + type(payload).__name__)


def encode_publish(subject, payload=None, inbox=None):
    """ Return the PUB control line, the raw payload, and the trailing CRLF
        as one contiguous byte string.
    """

    validate_subject(subject)
    if inbox is not None:
        validate_subject(inbox)

    payload = payload_bytes(payload)
    line = encode(fields.PUB, subject, inbox, len(payload))
    return line + payload + fields.CRLF


def encode_subscribe(subject, sid, queue=None):
    validate_subject(subject)
    if queue is not None:
        validate_subject(queue)

    return encode(fields.SUB, subject, queue, sid)


def encode_unsubscribe(sid, quantity=None):
    if quantity is not None:
        quantity = int(quantity)
        if quantity < 0:
            raise ValueError('unsubscribe quantity must be non-negative')

    return encode(fields.UNSUB, sid, quantity)


def encode_connect(options):
    """ The CONNECT body is the JSON encoding of the options dictionary; it
        is sent as-is, not split into space-separated fields.
    """

    body = json.dumps(options.connect_options())
    return fields.CONNECT.encode() + b' ' + body + fields.CRLF


def encode_ping():
    return encode(fields.PING)


def encode_pong():
    return encode(fields.PONG)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
