""" A connection that applies a payload :class:`natswire.encoders.Encoder`
    on the way out and on the way in. Framing is untouched: the encoder only
    ever sees, and produces, the payload block.
"""

import dataclasses

from .connection import Connection
from .encoders import JSONEncoder


class EncodedConnection(Connection):
    """ Identical to :class:`natswire.Connection`, except that published
        payloads are passed through *encoder* first, and callbacks receive
        messages whose payload has already been decoded. The default
        encoder is :class:`natswire.encoders.JSONEncoder`.

        A payload that fails to decode is reported the same way as a
        callback that raises: it is logged, and the dispatch loop carries on.
    """

    def __init__(self, options=None, encoder=None, transport_factory=None):

        if encoder is None:
            encoder = JSONEncoder()

        self.encoder = encoder
        Connection.__init__(self, options, transport_factory)


    def _encode_payload(self, payload):
        return self.encoder.encode(payload)


    def _decode_message(self, message):
        payload = self.encoder.decode(message.payload)
        return dataclasses.replace(message, payload=payload)


# end of class EncodedConnection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
