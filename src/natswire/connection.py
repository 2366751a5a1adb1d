""" The connection state machine and the dispatch loop. A :class:`Connection`
    owns one transport at a time, performs the INFO/CONNECT/PING handshake,
    and exposes the publish/subscribe/request operations on top of it.

    Everything here is synchronous. Nothing runs in the background: inbound
    frames are only read while the caller is inside :func:`Connection.wait`
    (or :func:`Connection.request`, which calls it), and that includes
    answering the broker's keepalive PINGs. A connection must not be shared
    between threads without synchronization provided by the caller.
"""

import enum
import logging
import numbers
import uuid

from . import protocol
from .errors import (
    CallbackError,
    ConnectError,
    HandshakeError,
    NotConnectedError,
    ProtocolError,
    TransportError,
)
from .options import ConnectionOptions
from .protocol import fields, wire
from .protocol.frame import FrameKind, is_error_frame, parse_line
from .protocol.info import ServerInfo
from .protocol.message import Message
from .subscription import Registry
from .transport import TcpTransport

logger = logging.getLogger(__name__)


class State(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    AWAITING_INFO = 'awaiting info'
    TLS_UPGRADING = 'tls upgrading'
    HANDSHAKING = 'handshaking'
    READY = 'ready'


def tcp_transport(options):
    """ Default transport factory: a plain TCP connection to the address in
        the supplied :class:`ConnectionOptions`.
    """

    return TcpTransport(options.host, options.port, chunk_size=options.chunk_size, debug=options.debug)


class Connection:
    """ A client connection to a single NATS broker. The *options* are a
        :class:`natswire.ConnectionOptions` instance; the defaults connect
        to localhost:4222 without authentication. The *transport_factory*
        is called with the options every time a new transport is needed,
        and must return an unopened :class:`natswire.transport.Transport`.

        :ivar pings: The number of PINGs sent.
        :ivar pubs: The number of messages published.
        :ivar reconnects: The number of calls to :func:`reconnect`.
        :ivar server_info: The :class:`ServerInfo` from the most recent
            handshake, or None.
        :ivar state: The current :class:`State`.
    """

    def __init__(self, options=None, transport_factory=None):

        if options is None:
            options = ConnectionOptions()

        if transport_factory is None:
            transport_factory = tcp_transport

        self.options = options
        self.debug = options.debug
        self.chunk_size = options.chunk_size
        self.timeout = options.timeout

        self.pings = 0
        self.pubs = 0
        self.reconnects = 0

        self.registry = Registry()
        self.server_info = None
        self.state = State.DISCONNECTED

        self._transport = None
        self._transport_factory = transport_factory


    def __enter__(self):
        if not self.is_connected:
            self.connect()
        return self


    def __exit__(self, *exc_info):
        self.close()


    def __repr__(self):
        return '<%s %s %s>' % (self.__class__.__name__, self.options.address, self.state.value)


    @property
    def is_connected(self):
        transport = self._transport
        return transport is not None and transport.is_open


    @property
    def transport(self):
        return self._transport


    def pings_count(self):
        return self.pings


    def pubs_count(self):
        return self.pubs


    def reconnects_count(self):
        return self.reconnects


    def subscriptions_count(self):
        return len(self.registry)


    @property
    def subscriptions(self):
        """ The ids of all subscriptions currently eligible for dispatch.
        """

        return self.registry.sids()


    @property
    def connected_server_id(self):

        if self.server_info is None:
            return None
        return self.server_info.server_id


    def set_debug(self, debug):
        """ Log every byte sent and received, at DEBUG level, via the
            ``natswire.transport.tcp`` logger.
        """

        self.debug = bool(debug)
        if self._transport is not None:
            self._transport.debug = self.debug


    def set_chunk_size(self, chunk_size):
        """ Set the maximum number of bytes requested per read while
            receiving a message payload.
        """

        chunk_size = int(chunk_size)
        if chunk_size <= 0:
            raise ValueError('chunk size must be positive')

        self.chunk_size = chunk_size
        if self._transport is not None:
            self._transport.chunk_size = chunk_size


    def set_stream_timeout(self, timeout):
        """ Set the read/write timeout, in seconds. The value is retained for
            future (re)connects regardless; the return value is True only if
            it was also applied to a live transport.
        """

        if timeout is not None and not isinstance(timeout, numbers.Real):
            return False

        self.timeout = timeout

        if not self.is_connected:
            return False

        return self._transport.set_timeout(timeout)


    def new_inbox(self):
        """ Return a unique subject suitable as a reply address.
        """

        return fields.INBOX_PREFIX + uuid.uuid4().hex


    def _require_ready(self):

        if self.state is State.READY and self.is_connected:
            return

        raise NotConnectedError('connection to %s is %s' % (self.options.address, self.state.value))


    def _send(self, data):
        """ Hand *data* to the transport. Any transport failure leaves the
            connection closed before the error propagates.
        """

        try:
            self._transport.send(data)
        except TransportError:
            self.close()
            raise


    def _receive_line(self, failure, context):

        line = self._transport.receive_line()

        if line == b'':
            raise failure('connection closed by %s during %s' % (self.options.address, context))

        return line


    def _ping(self):
        self._send(wire.encode_ping())
        self.pings += 1


    def connect(self, timeout=None):
        """ Open a new transport to the broker and perform the handshake:
            read the INFO greeting, upgrade to TLS if the broker requires it,
            send CONNECT, then PING and check the reply. The *timeout*, in
            seconds, applies to the TCP connect and to every subsequent read;
            if it is None the most recent timeout is reused.

            On any failure the transport is closed and the error propagates;
            no retry is attempted.
        """

        if timeout is None:
            timeout = self.timeout
        self.timeout = timeout

        # An old transport must be fully gone before a new one opens.
        self.close()

        self.state = State.CONNECTING
        transport = self._transport_factory(self.options)
        transport.chunk_size = self.chunk_size
        transport.debug = self.debug

        try:
            transport.open(timeout)
            self._transport = transport
            transport.set_timeout(timeout)

            self.state = State.AWAITING_INFO
            greeting = self._receive_line(HandshakeError, 'greeting')

            if is_error_frame(greeting):
                reason = greeting.decode('utf-8', 'replace').strip()
                raise HandshakeError('failed connection: ' + reason)

            server_info = ServerInfo.parse(greeting)
            self.server_info = server_info

            if server_info.tls_required:
                self.state = State.TLS_UPGRADING
                transport.upgrade_to_tls(self.options.tls_context, self.options.host)

            self.state = State.HANDSHAKING
            self._send(wire.encode_connect(self.options))
            self._ping()

            response = self._receive_line(ConnectError, 'handshake')

            if is_error_frame(response):
                reason = response.decode('utf-8', 'replace').strip()
                raise ConnectError('failed ping: ' + reason)

        except Exception:
            self.close()
            raise

        self.state = State.READY
        logger.info('Connected to %s, server id %s', self.options.address, server_info.server_id)


    def close(self):
        """ Release the transport. Closing a closed connection does nothing.
        """

        transport = self._transport
        self._transport = None
        self.state = State.DISCONNECTED

        if transport is None:
            return

        transport.close()
        logger.debug('Closed connection to %s', self.options.address)


    def reconnect(self, resubscribe=False):
        """ Tear down the current transport and connect again with the same
            options and timeout. Subscription ids never survive a reconnect;
            if *resubscribe* is True every subject registered via
            :func:`subscribe` or :func:`queue_subscribe` is subscribed anew.
            Returns a dictionary mapping each resubscribed subject to its new
            subscription id.
        """

        sids = dict()
        self.reconnects += 1

        logger.info('Reconnecting to %s (attempt %d)', self.options.address, self.reconnects)

        self.close()
        self.registry.clear()
        self.connect(self.timeout)

        if resubscribe and self.is_connected:
            for subject, queue, callback in self.registry.snapshot():
                if queue is None:
                    sids[subject] = self.subscribe(subject, callback)
                else:
                    sids[subject] = self.queue_subscribe(subject, queue, callback)

        return sids


    def ping(self):
        """ Send a PING to the broker. The PONG is consumed, and ignored, by
            the dispatch loop.
        """

        self._require_ready()
        self._ping()


    def _encode_payload(self, payload):
        return payload


    def _decode_message(self, message):
        return message


    def publish(self, subject, payload=None, inbox=None):
        """ Publish *payload* on *subject*, optionally naming an *inbox* for
            replies. Nothing is acknowledged; delivery is at most once.
        """

        self._require_ready()

        payload = wire.payload_bytes(self._encode_payload(payload))

        maximum = self.server_info.max_payload
        if maximum is not None and len(payload) > maximum:
            raise ValueError('payload of %d bytes exceeds server maximum of %d' % (len(payload), maximum))

        data = wire.encode_publish(subject, payload, inbox)
        self._send(data)
        self.pubs += 1

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('->> PUB %s %s %d', subject, inbox or '', len(payload))


    def _subscribe(self, subject, queue, callback, transient=False):

        self._require_ready()
        protocol.frame.validate_subject(subject)
        if queue is not None:
            protocol.frame.validate_subject(queue)

        if transient:
            sid = self.registry.add_transient(subject, callback)
        else:
            sid = self.registry.add(subject, callback, queue)

        self._send(wire.encode_subscribe(subject, sid, queue))

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('->> SUB %s %s %s', subject, queue or '', sid)

        return sid


    def subscribe(self, subject, callback):
        """ Subscribe to *subject*; *callback* will be invoked with a
            :class:`natswire.Message` for each delivery. Returns the new
            subscription id.
        """

        return self._subscribe(subject, None, callback)


    def queue_subscribe(self, subject, queue, callback):
        """ As :func:`subscribe`, but as a member of the *queue* group: the
            broker delivers each message to only one member of the group.
        """

        return self._subscribe(subject, queue, callback)


    def unsubscribe(self, sid, quantity=None):
        """ Unsubscribe *sid*. With no *quantity* the subscription is removed
            locally at once, and the subject will not be resubscribed on
            reconnect unless another subscription to it remains. With a
            *quantity* the broker stops after that many further deliveries;
            the client is not told when that happens, so the local entry is
            left in place.
        """

        self._require_ready()
        self._send(wire.encode_unsubscribe(sid, quantity))

        if quantity is None:
            self.registry.release(sid)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('->> UNSUB %s %s', sid, '' if quantity is None else quantity)


    def request(self, subject, payload, callback):
        """ Publish a request on *subject* and block until a single reply
            arrives, invoking *callback* with it. The reply inbox is a
            private, never-replayed subscription limited to one delivery;
            it is gone from the registry when this method returns. Returns
            the number of replies dispatched, zero if the connection closed
            (timed out) first.
        """

        inbox = self.new_inbox()
        sid = self._subscribe(inbox, None, callback, transient=True)

        try:
            self.unsubscribe(sid, 1)
            self.publish(subject, payload, inbox)
            count = self.wait(1)
        finally:
            self.registry.remove(sid)

        return count


    def _handle_msg(self, frame):

        payload = self._transport.receive_exact(frame.length)
        trailer = self._transport.receive_exact(len(fields.CRLF))

        if trailer != fields.CRLF:
            raise ProtocolError('payload for %s not terminated by CRLF' % (frame.sid,))

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('<<- MSG %s %s %s %d', frame.subject, frame.sid, frame.inbox or '', frame.length)

        # Unknown ids are reported before any decoding is attempted.
        self.registry.get(frame.sid)

        message = Message(frame.subject, payload, frame.sid, self, frame.inbox)

        try:
            message = self._decode_message(message)
        except Exception as exc:
            raise CallbackError(frame.sid, 'cannot decode payload on ' + frame.subject) from exc

        self.registry.dispatch(frame.sid, message)


    def wait(self, quantity=0):
        """ Read and dispatch inbound frames until *quantity* messages have
            been delivered (forever, if zero), answering PINGs along the way.
            Returns the number of messages dispatched.

            End of stream, a timeout, or any other read failure closes the
            connection and ends the loop normally. A malformed frame, or a
            message for an unknown subscription id, also closes the
            connection, but the :class:`ProtocolError` propagates. An
            exception raised by a callback is logged and does not stop the
            loop.
        """

        self._require_ready()
        transport = self._transport
        count = 0

        while self.is_connected and self._transport is transport:

            try:
                line = transport.receive_line()

                if line == b'':
                    logger.info('Connection closed by %s', self.options.address)
                    break

                frame = parse_line(line)

                if frame.kind is FrameKind.PING:
                    self._send(wire.encode_pong())

                elif frame.kind is FrameKind.MSG:
                    try:
                        self._handle_msg(frame)
                    except CallbackError:
                        logger.exception('Error in callback for subscription %s on %s', frame.sid, frame.subject)

                    count += 1

                    if quantity and count >= quantity:
                        return count

                elif frame.kind is FrameKind.ERR:
                    logger.error("<<- -ERR '%s'", frame.body)

            except TransportError as exc:
                logger.debug('Dispatch loop ending: %s', exc)
                break

            except ProtocolError:
                self.close()
                raise

        # A callback may have replaced the transport via reconnect(); only
        # the transport this loop was reading from gets closed.
        if self._transport is transport:
            self.close()

        return count


# end of class Connection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
