""" Exception classes raised by natswire. Callers that do not care about
    the specifics can catch :class:`NatsError`; everything raised on purpose
    by this package derives from it.

    Establishment failures (:class:`HandshakeError` and its subclasses) and
    transport failures surface to the caller of :func:`Connection.connect`
    and :func:`Connection.reconnect`; no retry is ever attempted here.
"""


class NatsError(Exception):
    """ Base class for all natswire errors.
    """


# Transport agnostic exceptions

class TransportError(NatsError):
    """ I/O failure on the underlying byte stream: broken pipe, reset,
        premature end of stream.
    """


class TransportTimeout(TransportError):
    """ A read, write, or connect did not complete in the configured time.
    """


class NotConnectedError(TransportError):
    """ An operation was attempted on a connection that is not ready.
    """


class ProtocolError(NatsError):
    """ The broker sent something that could not be parsed as a frame.
    """


class UnknownSubscriptionError(ProtocolError):
    """ A MSG frame referenced a subscription id that is not registered.
    """

    def __init__(self, sid):
        self.sid = sid
        ProtocolError.__init__(self, 'subscription not found: ' + str(sid))


class HandshakeError(NatsError):
    """ The broker greeting was an error, or could not be understood.
    """


class ConnectError(HandshakeError):
    """ The broker rejected the CONNECT/PING exchange.
    """


class TLSNegotiationError(HandshakeError):
    """ The TLS upgrade required by the broker could not be completed.
    """


class CallbackError(NatsError):
    """ A subscription callback raised an exception. The original exception
        is chained as ``__cause__``.
    """

    def __init__(self, sid, message=None):
        self.sid = sid
        if message is None:
            message = 'callback for subscription %s raised an exception' % (sid)
        NatsError.__init__(self, message)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
