"""
Firebase Management API app configuration artifacts.
https://firebase.google.com/docs/projects/api/reference/rest/v1beta1/projects.androidApps/getConfig
The config file (google-services.json, GoogleService-Info.plist) comes back
as base64 in configFileContents.
"""
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import ClassVar, Self
import logging

from .resources import GoogleApiResourceBase
from .access import gws

logger = logging.getLogger(__name__)

_get_service = partial(gws.require_service, "firebase", "v1beta1")


def _config_name(name: str) -> str:
    n = str(name).rstrip("/")
    return n if n.endswith("/config") else f"{n}/config"


@dataclass
class AppConfig(GoogleApiResourceBase):
    """
    Common shape of the Android and iOS config artifacts.
    Subclasses say which collection they come from.
    """
    configFilename: str|None = field(default=None)
    configFileContents: bytes|None = field(default=None)

    bytes_fields: ClassVar[tuple[str, ...]] = ("configFileContents",)
    _collection: ClassVar[str] = ""

    def __bool__(self) -> bool:
        return bool(self.configFilename) and bool(self.configFileContents)

    def __str__(self) -> str:
        if self:
            return f"{self.configFilename}<{len(self.configFileContents)} bytes>"
        return "<empty>"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def get(cls, name: str) -> Self:
        """
        Fetch the config artifact for an app.
        name is the app resource name, e.g. projects/my-project/androidApps/1:123:android:abc,
        with or without the trailing /config.
        """
        if not cls._collection:
            raise RuntimeError(f"{cls.__name__} has no app collection to fetch from")
        apps = getattr(_get_service().projects(), cls._collection)()
        response = apps.getConfig(name=_config_name(name)).execute()
        return cls.from_base(response)

    def write(self, directory: Path|str = ".") -> Path:
        """
        Write the config file into directory under its configFilename.
        """
        if not self:
            raise RuntimeError(f"{self.__class__.__name__}::write needs a filename and contents")
        path = Path(directory) / Path(self.configFilename).name
        path.write_bytes(self.configFileContents)
        logger.info("wrote %d bytes to %s", len(self.configFileContents), path)
        return path


@dataclass
class AndroidAppConfig(AppConfig):
    """
    https://firebase.google.com/docs/projects/api/reference/rest/v1beta1/AndroidAppConfig
    configFilename is typically google-services.json
    """
    _collection: ClassVar[str] = "androidApps"


@dataclass
class IosAppConfig(AppConfig):
    """
    https://firebase.google.com/docs/projects/api/reference/rest/v1beta1/IosAppConfig
    configFilename is typically GoogleService-Info.plist
    """
    _collection: ClassVar[str] = "iosApps"
