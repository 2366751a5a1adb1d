import natswire
import pytest


def test_defaults():

    options = natswire.ConnectionOptions()

    assert options.host == 'localhost'
    assert options.port == 4222
    assert options.address == 'tcp://localhost:4222'
    assert options.chunk_size == 1500
    assert options.timeout is None
    assert options.version == natswire.__version__


def test_connect_options():

    options = natswire.ConnectionOptions()
    connect = options.connect_options()

    assert connect == {
        'lang': 'python',
        'version': natswire.__version__,
        'verbose': False,
        'pedantic': False,
    }

    # A username wins over a token.

    options = natswire.ConnectionOptions(user='derek', password='pw', token='abc')
    connect = options.connect_options()
    assert connect['user'] == 'derek'
    assert connect['pass'] == 'pw'
    assert 'auth_token' not in connect

    options = natswire.ConnectionOptions(token='abc')
    connect = options.connect_options()
    assert connect['auth_token'] == 'abc'
    assert 'user' not in connect


def test_str_is_json():

    options = natswire.ConnectionOptions(pedantic=True)
    decoded = natswire.json.loads(str(options))

    assert decoded['pedantic'] is True
    assert decoded['lang'] == 'python'


def test_set_options():

    options = natswire.ConnectionOptions()
    options.set_options({'host': 'nats.example.com', 'port': '4443', 'verbose': 1})

    assert options.address == 'tcp://nats.example.com:4443'
    assert options.verbose is True

    with pytest.raises(ValueError):
        options.set_options({'colour': 'blue'})


def test_chunk_size_must_be_positive():

    with pytest.raises(ValueError):
        natswire.ConnectionOptions(chunk_size=0)


def test_from_environment():

    environ = dict()
    environ['NATSWIRE_HOST'] = 'broker.internal'
    environ['NATSWIRE_PORT'] = '14222'
    environ['NATSWIRE_TOKEN'] = 'secret'
    environ['NATSWIRE_TIMEOUT'] = '2.5'
    environ['UNRELATED'] = 'ignored'

    options = natswire.ConnectionOptions.from_environment(environ=environ)

    assert options.host == 'broker.internal'
    assert options.port == 14222
    assert options.token == 'secret'
    assert options.timeout == 2.5
    assert options.user is None


def test_from_empty_environment():

    options = natswire.ConnectionOptions.from_environment(environ={})
    assert options.address == 'tcp://localhost:4222'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
