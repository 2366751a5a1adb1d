''' JSON handling for the INFO greeting, the CONNECT options body, and any
    payload handled by :class:`natswire.encoders.JSONEncoder`. Encoding
    always produces bytes, since the CONNECT line is assembled from bytes;
    the encoded form is compact and never contains a newline.
'''

import msgspec

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

dumps = encoder.encode
loads = decoder.decode
DecodeError = msgspec.DecodeError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
