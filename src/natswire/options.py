""" Connection options. A :class:`ConnectionOptions` instance supplies the
    broker address, the credentials and flags sent in the CONNECT frame, and
    the TLS context used if the broker requires encryption. Once handed to
    a :class:`natswire.Connection` it should be treated as read-only.
"""

import os

from . import json
from .transport.base import DEFAULT_CHUNK_SIZE

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 4222
DEFAULT_LANG = 'python'


class ConnectionOptions:
    """ The settable attributes are exactly the keyword arguments of the
        constructor; :func:`set_options` refuses anything else.

        :ivar host: The broker hostname.
        :ivar port: The broker port.
        :ivar user: Username for user/password authentication.
        :ivar password: Password for user/password authentication.
        :ivar token: Authentication token, used only if no *user* is set.
        :ivar tls_context: An :class:`ssl.SSLContext` used if the broker
            requires TLS; a default client context is used if this is None.
        :ivar timeout: Default connect and read timeout, in seconds.
    """

    fields = ('host', 'port', 'user', 'password', 'token', 'lang', 'version',
              'verbose', 'pedantic', 'reconnect', 'tls_context', 'chunk_size',
              'timeout', 'debug')

    def __init__(self, host=DEFAULT_HOST, port=DEFAULT_PORT, user=None,
                 password=None, token=None, lang=DEFAULT_LANG, version=None,
                 verbose=False, pedantic=False, reconnect=True,
                 tls_context=None, chunk_size=DEFAULT_CHUNK_SIZE,
                 timeout=None, debug=False):

        if version is None:
            from . import __version__ as version

        self.host = host
        self.port = int(port)
        self.user = user
        self.password = password
        self.token = token
        self.lang = lang
        self.version = version
        self.verbose = bool(verbose)
        self.pedantic = bool(pedantic)
        self.reconnect = bool(reconnect)
        self.tls_context = tls_context
        self.chunk_size = int(chunk_size)
        self.timeout = timeout
        self.debug = bool(debug)

        if self.chunk_size <= 0:
            raise ValueError('chunk_size must be positive')


    def __repr__(self):
        return '<ConnectionOptions %s>' % (self.address)


    def __str__(self):
        return self.connect_options_json().decode()


    @property
    def address(self):
        return 'tcp://%s:%d' % (self.host, self.port)


    def connect_options(self):
        """ Return the dictionary sent as the body of the CONNECT frame.
            Credentials are included only if set; a username takes
            precedence over a token.
        """

        options = dict()
        options['lang'] = self.lang
        options['version'] = self.version
        options['verbose'] = self.verbose
        options['pedantic'] = self.pedantic

        if self.user is not None:
            options['user'] = self.user
            options['pass'] = self.password
        elif self.token is not None:
            options['auth_token'] = self.token

        return options


    def connect_options_json(self):
        return json.dumps(self.connect_options())


    def set_options(self, options):
        """ Update any number of attributes from the *options* mapping.
        """

        for key, value in options.items():
            if key not in self.fields:
                raise ValueError('unknown connection option: ' + str(key))

            if key in ('port', 'chunk_size'):
                value = int(value)
            elif key in ('verbose', 'pedantic', 'reconnect', 'debug'):
                value = bool(value)

            setattr(self, key, value)

        return self


    @classmethod
    def from_environment(cls, prefix='NATSWIRE_', environ=None):
        """ Build options from environment variables: ``NATSWIRE_HOST``,
            ``NATSWIRE_PORT``, ``NATSWIRE_USER``, ``NATSWIRE_PASSWORD``,
            ``NATSWIRE_TOKEN`` and ``NATSWIRE_TIMEOUT``. Unset variables fall
            back to the defaults.
        """

        if environ is None:
            environ = os.environ

        mapping = dict()
        names = ('host', 'port', 'user', 'password', 'token', 'timeout')

        for name in names:
            try:
                value = environ[prefix + name.upper()]
            except KeyError:
                continue

            if name == 'timeout':
                value = float(value)

            mapping[name] = value

        options = cls()
        options.set_options(mapping)
        return options


# end of class ConnectionOptions


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
