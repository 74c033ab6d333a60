"""
Base64 codec for byte valued fields in Google API JSON payloads.
See https://datatracker.ietf.org/doc/html/rfc4648#section-4 for the encoding.

Any field declared as 'bytes' in a discovery document is sent and received
as standard base64 text with '=' padding.  Encoding is total, decoding is strict:
anything that isn't a correctly structured encoding raises EncodingError rather
than quietly producing different bytes.
"""
import re
from collections.abc import Iterable

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = "="

_DECODE_TABLE = {c: i for i, c in enumerate(ALPHABET)}

# first char that can't appear in a base64 string at all
_INVALID_CHAR_RE = re.compile(r"[^A-Za-z0-9+/=]")
# whole string is groups of 4 with at most a single padded group at the end
_STRUCTURE_RE = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")


class EncodingError(ValueError):
    """
    Raised when text can't be decoded as base64.
    position is the index into the input where the problem was found, or None
    when the input as a whole is the problem (e.g. its length).
    """
    def __init__(self, message: str, position: int|None = None) -> None:
        super().__init__(message)
        self.position = position


def _as_bytes(data: bytes|bytearray|memoryview|Iterable[int]) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    # bytes() will raise ValueError for anything outside 0..255
    return bytes(list(data))


def encode(data: bytes|bytearray|memoryview|Iterable[int]) -> str:
    """
    Encode a byte sequence to padded base64 text.
    The output is always 4 * ceil(len(data) / 3) characters.
    """
    b = _as_bytes(data)
    n = len(b)
    out = []
    full = n - n % 3
    for i in range(0, full, 3):
        v = (b[i] << 16) | (b[i + 1] << 8) | b[i + 2]
        out.append(ALPHABET[v >> 18])
        out.append(ALPHABET[(v >> 12) & 0x3f])
        out.append(ALPHABET[(v >> 6) & 0x3f])
        out.append(ALPHABET[v & 0x3f])
    rem = n - full
    if rem == 1:
        v = b[full] << 16
        out.append(ALPHABET[v >> 18])
        out.append(ALPHABET[(v >> 12) & 0x3f])
        out.append(PAD * 2)
    elif rem == 2:
        v = (b[full] << 16) | (b[full + 1] << 8)
        out.append(ALPHABET[v >> 18])
        out.append(ALPHABET[(v >> 12) & 0x3f])
        out.append(ALPHABET[(v >> 6) & 0x3f])
        out.append(PAD)
    return "".join(out)


def _validate(text: str) -> None:
    """
    Work out what is wrong, if anything, so the error can say where.
    """
    if len(text) % 4:
        raise EncodingError(f"base64 length must be a multiple of 4, got {len(text)}")
    m = _INVALID_CHAR_RE.search(text)
    if m:
        raise EncodingError(f"invalid base64 character {m.group(0)!r} at {m.start()}", m.start())
    if not _STRUCTURE_RE.match(text):
        pos = text.find(PAD)
        raise EncodingError(f"misplaced base64 padding at {pos}", pos)


def decode(text: str|bytes|bytearray|memoryview) -> bytes:
    """
    Decode padded base64 text back to the bytes that encode() would have been given.
    Raises EncodingError for a length that isn't a multiple of 4, characters
    outside the alphabet, or padding anywhere but the last one or two positions.
    """
    if isinstance(text, (bytes, bytearray, memoryview)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise EncodingError(f"non-ascii byte in base64 input at {e.start}", e.start) from e
    _validate(text)
    out = bytearray()
    for i in range(0, len(text), 4):
        group = text[i:i + 4]
        pads = group.count(PAD)
        v = 0
        for c in group:
            v = (v << 6) | _DECODE_TABLE.get(c, 0)
        out.append(v >> 16)
        if pads < 2:
            out.append((v >> 8) & 0xff)
        if pads < 1:
            out.append(v & 0xff)
    return bytes(out)
