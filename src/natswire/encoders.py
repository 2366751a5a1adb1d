""" Payload encoders. An encoder turns an arbitrary value into the bytes
    carried by a PUB frame, and turns the bytes of a MSG frame back into a
    value. The framing layer never looks inside the result.
"""

from abc import ABC, abstractmethod

import msgspec.msgpack

from . import json
from .protocol import wire


class Encoder(ABC):

    @abstractmethod
    def encode(self, value):
        """ Return the wire representation of *value*, as bytes.
        """

    @abstractmethod
    def decode(self, payload):
        """ Return the value represented by the *payload* bytes.
        """


class RawEncoder(Encoder):
    """ Bytes pass through untouched; strings are sent as UTF-8. Anything
        else is a TypeError. Decoding always returns bytes.
    """

    def encode(self, value):
        return wire.payload_bytes(value)


    def decode(self, payload):
        return payload


class JSONEncoder(Encoder):
    """ JSON via :mod:`natswire.json`. An empty payload decodes to None.
    """

    def encode(self, value):
        return json.dumps(value)


    def decode(self, payload):

        if payload == b'':
            return None
        return json.loads(payload)


class MsgpackEncoder(Encoder):
    """ MessagePack, a compact binary serialization that round-trips bytes
        values without any text escaping. An empty payload decodes to None.
    """

    def __init__(self):
        self._encoder = msgspec.msgpack.Encoder()
        self._decoder = msgspec.msgpack.Decoder()


    def encode(self, value):
        return self._encoder.encode(value)


    def decode(self, payload):

        if payload == b'':
            return None
        return self._decoder.decode(payload)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
