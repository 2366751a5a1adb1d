import natswire
import pytest

from natswire.errors import TLSNegotiationError, TransportError, TransportTimeout
from natswire.transport import Transport


def subject_matches(pattern, subject):
    """ NATS subject matching: '*' matches one token, '>' matches one or
        more trailing tokens.
    """

    wanted = pattern.split('.')
    tokens = subject.split('.')

    for index, token in enumerate(wanted):
        if token == '>':
            return len(tokens) > index
        if index >= len(tokens):
            return False
        if token != '*' and token != tokens[index]:
            return False

    return len(tokens) == len(wanted)


class FakeBroker(Transport):
    """ An in-memory stand-in for both the socket and the NATS server on the
        other end of it. Everything the client sends is interpreted
        immediately, and any resulting broker output is queued for the
        client to read. Reopening the transport is a fresh connection: the
        broker forgets all subscriptions, as a real server would.
    """

    def __init__(self, server_id='FAKE', tls_required=False, max_payload=1048576):

        self.info = dict()
        self.info['server_id'] = server_id
        self.info['version'] = '2.10.0'
        self.info['tls_required'] = tls_required
        self.info['max_payload'] = max_payload

        self.greeting = None
        self.connect_error = None
        self.refuse = False
        self.tls_fail = False
        self.tls = False
        self.eof = False

        self.opens = 0
        self.closes = 0
        self.commands = list()
        self.chunks = list()
        self.services = dict()
        self.subs = dict()

        self._open = False
        self._inbound = bytearray()
        self._outbound = bytearray()


    @property
    def is_open(self):
        return self._open


    def open(self, timeout=None):

        if self.refuse:
            raise TransportError('connection refused')

        self.opens += 1
        self._open = True
        self.eof = False
        self.tls = False
        self.subs = dict()
        self._outbound = bytearray()

        if self.greeting is None:
            greeting = b'INFO ' + natswire.json.dumps(self.info) + b'\r\n'
        else:
            greeting = self.greeting

        self._inbound = bytearray(greeting)


    def close(self):

        if self._open:
            self.closes += 1
        self._open = False


    def set_timeout(self, timeout):
        return self._open


    def upgrade_to_tls(self, context=None, server_hostname=None):

        if self.tls_fail:
            self.close()
            raise TLSNegotiationError('handshake failure')

        self.tls = True


    def inject(self, data):
        """ Queue raw bytes for the client to read.
        """

        self._inbound += data


    def send(self, data):

        if not self._open:
            raise TransportError('transport is not open')

        self._outbound += data
        self._process()


    def receive_line(self):

        if not self._open:
            raise TransportError('transport is not open')

        if len(self._inbound) == 0:
            if self.eof:
                return b''
            raise TransportTimeout('read timed out')

        end = self._inbound.find(b'\n')
        if end == -1:
            end = len(self._inbound)
        else:
            end += 1

        line = bytes(self._inbound[:end])
        del self._inbound[:end]
        return line


    def receive_exact(self, length):

        received = bytearray()

        while len(received) < length:
            size = min(self.chunk_size, length - len(received))
            chunk = bytes(self._inbound[:size])
            del self._inbound[:size]

            if not chunk:
                raise TransportError('stream closed')

            self.chunks.append(len(chunk))
            received += chunk

        return bytes(received)


    # Broker behavior.

    def _process(self):

        while True:
            end = self._outbound.find(b'\r\n')
            if end == -1:
                return

            line = bytes(self._outbound[:end]).decode()
            fields = line.split()
            command = fields[0].upper() if fields else ''

            if command == 'PUB':
                length = int(fields[-1])
                needed = end + 2 + length + 2
                if len(self._outbound) < needed:
                    return
                payload = bytes(self._outbound[end + 2:end + 2 + length])
                del self._outbound[:needed]
                self.commands.append(line)
                self._pub(fields, payload)
                continue

            del self._outbound[:end + 2]
            self.commands.append(line)

            if command == 'CONNECT':
                if self.connect_error is not None:
                    self.inject(b"-ERR '" + self.connect_error.encode() + b"'\r\n")
            elif command == 'PING':
                self.inject(b'PONG\r\n')
            elif command == 'SUB':
                self._sub(fields)
            elif command == 'UNSUB':
                self._unsub(fields)


    def _sub(self, fields):

        if len(fields) == 4:
            subject, queue, sid = fields[1:]
        else:
            subject, sid = fields[1:]
            queue = None

        self.subs[sid] = [subject, queue, None]


    def _unsub(self, fields):

        sid = fields[1]
        if len(fields) == 3:
            try:
                self.subs[sid][2] = int(fields[2])
            except KeyError:
                pass
        else:
            self.subs.pop(sid, None)


    def _pub(self, fields, payload):

        subject = fields[1]
        if len(fields) == 4:
            reply = fields[2]
        else:
            reply = None

        self.deliver(subject, payload, reply)

        try:
            service = self.services[subject]
        except KeyError:
            pass
        else:
            if reply is not None:
                self.deliver(reply, service(payload))


    def deliver(self, subject, payload, reply=None):
        """ Route a message to every matching subscription, honoring queue
            groups and UNSUB limits.
        """

        groups = set()

        for sid, record in list(self.subs.items()):
            pattern, queue, remaining = record

            if not subject_matches(pattern, subject):
                continue

            if queue is not None:
                if queue in groups:
                    continue
                groups.add(queue)

            if reply is None:
                line = 'MSG %s %s %d\r\n' % (subject, sid, len(payload))
            else:
                line = 'MSG %s %s %s %d\r\n' % (subject, sid, reply, len(payload))

            self.inject(line.encode() + payload + b'\r\n')

            if remaining is not None:
                remaining -= 1
                if remaining <= 0:
                    del self.subs[sid]
                else:
                    record[2] = remaining


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def connection(broker):

    options = natswire.ConnectionOptions(timeout=1)
    connection = natswire.Connection(options, transport_factory=lambda options: broker)
    connection.connect()

    yield connection

    connection.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
