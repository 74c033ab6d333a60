"""
Wire format helpers for Google API resources that carry raw bytes.
Google's REST APIs send any 'bytes' field as base64 text inside the JSON,
so every client ends up needing the same codec.  This puts it in one place
(b64) with strict decoding, plus a dataclass base (resources) that knows
which fields are bytes and converts them at the JSON boundary.

Firebase app configs, People contact photos and Firebase Rules files are
implemented on top of it.  Authenticated access to those APIs goes through
the access singleton, same as any other google-api-python-client user.
"""
from .b64 import encode, decode, EncodingError

__all__ = ["encode", "decode", "EncodingError"]
