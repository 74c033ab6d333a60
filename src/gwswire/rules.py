"""
Firebase Rules API source files.
https://firebase.google.com/docs/reference/rules/rest/v1/Source
Each File can carry a fingerprint (e.g. a git sha) which is bytes on the wire.
"""
import hashlib
from dataclasses import dataclass, field
from typing import ClassVar, List, Self

from .resources import GoogleApiResourceBase


@dataclass
class File(GoogleApiResourceBase):
    name: str|None = field(default=None)
    content: str|None = field(default=None)
    fingerprint: bytes|None = field(default=None)

    bytes_fields: ClassVar[tuple[str, ...]] = ("fingerprint",)

    def __bool__(self) -> bool:
        return bool(self.name) and self.content is not None

    @classmethod
    def from_content(cls, name: str, content: str) -> Self:
        """File with a sha1 fingerprint of its content."""
        return cls(name=name, content=content,
                   fingerprint=hashlib.sha1(content.encode("utf-8")).digest())


@dataclass
class Source(GoogleApiResourceBase):
    files: List[File] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.files)

    def fixup(self) -> None:
        super().fixup()
        # responses hand back plain dicts for the nested files
        self.files = [f if isinstance(f, File) else File.from_base(f) for f in self.files or []]
