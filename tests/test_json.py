import json
import natswire


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_natswire_encode_and_decode():
    encode_and_decode(natswire.json.dumps, natswire.json.loads)


def test_compact_encoding():

    assert natswire.json.dumps({'verbose': False, 'lang': 'python'}) == b'{"verbose":false,"lang":"python"}'


def test_decode_error():

    try:
        natswire.json.loads(b'{not json')
    except natswire.json.DecodeError:
        pass
    else:
        raise AssertionError('invalid JSON was accepted')


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['server_id'] = 'NCXBOBPVYCZ'
    input_dictionary['connect_urls'] = ['10.0.0.1:4222', '10.0.0.2:4222']
    input_dictionary['nested'] = {1: 'one', 'two': 2}
    input_dictionary['none'] = None
    input_dictionary['tls_required'] = True
    input_dictionary['verbose'] = False

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # The CONNECT body goes on the wire as a single line.

    if dump_is_bytes:
        assert b'\n' not in encoded

    decoded = loads(encoded)
    assert isinstance(decoded, dict)

    # JSON will not use bare integers as dictionary keys, they get translated
    # to strings upon encoding. Fix that one item and it should match.

    assert decoded != input_dictionary

    del decoded['nested']['1']
    decoded['nested'][1] = 'one'
    assert decoded == input_dictionary


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
