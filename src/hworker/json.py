''' Wrapper module providing the equivalent of :func:`json.loads` and
    :func:`json.dumps` on top of msgspec.
'''

import msgspec


# The msgspec 'encode' operation returns bytes; callers rely on 'dumps'
# always doing so. Encoding failures are reported as TypeError, decoding
# failures as one of the DecodeError classes.

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()
dumps = encoder.encode
loads = decoder.decode
DecodeError = (msgspec.DecodeError, UnicodeDecodeError)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
