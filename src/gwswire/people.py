from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import ClassVar, List, Self

from .resources import GoogleApiResourceBase
from .access import gws

_get_service = partial(gws.require_service, "people", "v1")


@dataclass
class UpdateContactPhotoRequest(GoogleApiResourceBase):
    """
    https://developers.google.com/people/api/rest/v1/people/updateContactPhoto
    photoBytes is the raw image, it gets base64 encoded on the way out.
    personFields is a comma separated field mask for the person returned in the
    response, empty skips returning the person.
    """
    photoBytes: bytes|None = field(default=None)
    personFields: str|None = field(default=None)
    sources: List[str]|None = field(default=None)

    bytes_fields: ClassVar[tuple[str, ...]] = ("photoBytes",)
    valid_sources: ClassVar[List[str]] = ["READ_SOURCE_TYPE_UNSPECIFIED",
                                          "READ_SOURCE_TYPE_PROFILE",
                                          "READ_SOURCE_TYPE_CONTACT",
                                          "READ_SOURCE_TYPE_DOMAIN_CONTACT"]

    def __bool__(self) -> bool:
        return bool(self.photoBytes)

    def fixup(self) -> None:
        super().fixup()
        if self.sources is not None:
            if isinstance(self.sources, str):
                self.sources = [self.sources]
            for s in self.sources:
                if s not in self.valid_sources:
                    raise ValueError(f"Invalid UpdateContactPhotoRequest source: {s}")

    @classmethod
    def from_file(cls, path: Path|str, personFields: str|None = None,
                  sources: List[str]|None = None) -> Self:
        """Read the photo from an image file."""
        return cls(photoBytes=Path(path).read_bytes(), personFields=personFields, sources=sources)

    def send(self, resourceName: str) -> dict:
        """
        Upload the photo to the contact, e.g. resourceName people/c12345.
        Returns the raw UpdateContactPhotoResponse dict.
        """
        if not self:
            raise RuntimeError("UpdateContactPhotoRequest::send needs photoBytes")
        if not str(resourceName).startswith("people/"):
            raise ValueError(f"Invalid contact resource name: {resourceName}")
        return _get_service().people().updateContactPhoto(resourceName=str(resourceName),
                                                          body=self.trim()).execute()
