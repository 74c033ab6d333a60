import logging
from dataclasses import fields, is_dataclass
from typing import ClassVar, List, Self

from .b64 import encode, decode, EncodingError

logger = logging.getLogger(__name__)


class GoogleApiResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Subclasses list their byte valued fields in bytes_fields.  Those are held
    as bytes on the object and go over the wire as base64 text, so to_base()
    encodes them and fixup() decodes anything that arrives as a string.
    """
    bytes_fields: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        self.fixup()

    @classmethod
    def from_base(cls, data: dict) -> Self:
        """
        Build from a response dict.  Unlike cls(**data) this drops keys the
        resource doesn't know about instead of blowing up on them, and any
        bad base64 is reported against the field it came from.
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__}.from_base expects a dict, got {type(data).__name__}")
        known = {f.name for f in fields(cls)} if is_dataclass(cls) else set()
        kwargs = {}
        for k, v in data.items():
            if k in known:
                kwargs[k] = v
            else:
                logger.debug("%s: dropping unknown field %s", cls.__name__, k)
        return cls(**kwargs)

    def to_base(self) -> dict:
        """
        Return the dict representation of the object as needed by the API client,
        byte fields as base64 text and nested resources as dicts.
        Call fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        b = {}
        if is_dataclass(self):
            for f in fields(self):
                v = getattr(self, f.name)
                if f.name in self.bytes_fields and v is not None:
                    v = encode(v)
                b[f.name] = self._to_wire(v)
        return b

    @classmethod
    def _to_wire(cls, v):
        if isinstance(v, GoogleApiResourceBase):
            return v.to_base()
        if isinstance(v, list):
            return [cls._to_wire(i) for i in v]
        if isinstance(v, dict):
            return {k: cls._to_wire(i) for k, i in v.items()}
        return v

    def trim(self) -> dict:
        """
        Return a 'trimmed' dict of the resource.  That is, removing any top level attributes
        that are empty or None.  Zero ints/floats and False are real values so they stay.
        Most API requests only want filled-in fields.
        """
        b = self.to_base()
        for k, v in list(b.items()):
            if v is None or (type(v) not in [int, bool, float] and not v):
                del b[k]
        return b

    def fixup(self) -> None:
        """
        Put byte fields into bytes.  Subclasses doing their own adjustments
        should call this too.
        """
        for name in self.bytes_fields:
            v = getattr(self, name, None)
            if isinstance(v, str):
                try:
                    setattr(self, name, decode(v))
                except EncodingError as e:
                    raise EncodingError(f"{self.__class__.__name__}.{name}: {e}", e.position) from e
            elif isinstance(v, (bytearray, memoryview)):
                setattr(self, name, bytes(v))

    def update_fields(self, **kwargs) -> List[str]:
        """
        Update fields that may be present.
        """
        updated_fields = []
        if is_dataclass(self):
            names = {f.name for f in fields(self)}
            for k, v in kwargs.items():
                if v is not None and k in names:
                    setattr(self, k, v)
                    updated_fields.append(k)
            self.fixup()
        return updated_fields
