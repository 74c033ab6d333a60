import math
import os
import pytest

from gwswire import encode, decode, EncodingError
from gwswire.b64 import ALPHABET

def test_vectors():
    assert(encode(b"") == "")
    assert(decode("") == b"")
    assert(encode(b"Man") == "TWFu")
    assert(decode("TWFu") == bytes([0x4D, 0x61, 0x6E]))
    assert(encode(b"Ma") == "TWE=")
    assert(decode("TWE=") == b"Ma")
    assert(encode(b"M") == "TQ==")
    assert(decode("TQ==") == b"M")
    assert(encode(bytes([0, 0, 0])) == "AAAA")
    assert(encode(b"\xff\xff\xff") == "////")
    assert(encode(b"\xfb\xef") == "++8=")

def test_accepts_byte_like_and_int_lists():
    assert(encode([0x4D, 0x61, 0x6E]) == "TWFu")
    assert(encode(bytearray(b"Ma")) == "TWE=")
    assert(encode(memoryview(b"M")) == "TQ==")
    with pytest.raises(ValueError):
        encode([256])

def test_round_trip_all_lengths():
    data = os.urandom(64)
    for n in range(len(data) + 1):
        b = data[:n]
        assert(decode(encode(b)) == b)
    every_byte = bytes(range(256))
    assert(decode(encode(every_byte)) == every_byte)

def test_length_padding_and_alphabet():
    for n in range(20):
        s = encode(bytes(range(n)))
        assert(len(s) == 4 * math.ceil(n / 3))
        assert(len(s) % 4 == 0)
        body = s.rstrip("=")
        assert(len(s) - len(body) == (3 - n % 3) % 3)
        assert(all(c in ALPHABET for c in body))

def test_decode_bytes_input():
    assert(decode(b"TWFu") == b"Man")
    assert(decode(bytearray(b"TWE=")) == b"Ma")
    assert(decode(memoryview(b"TQ==")) == b"M")
    with pytest.raises(EncodingError):
        decode("TWFu".encode("utf-16"))

@pytest.mark.parametrize("text", ["A", "TWF", "TWFuT", "A===", "====", "AB=C", "TQ==TWFu", "A!B=", "TW u", "TWFu\n"])
def test_decode_rejects_malformed(text):
    with pytest.raises(EncodingError):
        decode(text)

def test_error_position():
    with pytest.raises(EncodingError) as e:
        decode("A")
    assert(e.value.position is None)
    with pytest.raises(EncodingError) as e:
        decode("A!B=")
    assert(e.value.position == 1)
    with pytest.raises(EncodingError) as e:
        decode("TWFuAB=C")
    assert(e.value.position == 6)
    # still a ValueError for callers that don't care which
    assert(isinstance(e.value, ValueError))

def test_non_canonical_padding_bits():
    # trailing bits aren't zero but the structure is fine, so it decodes
    assert(decode("TR==") == b"M")
    assert(encode(decode("TR==")) == "TQ==")
