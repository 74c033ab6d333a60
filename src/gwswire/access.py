import copy
import json
import logging
from collections.abc import Iterable
from functools import wraps
from pathlib import Path

import google.auth
import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource
import googleapiclient.discovery_cache as discovery_cache

logger = logging.getLogger(__name__)


class _GoogleApiAccess():
    """
    Authenticated access to the Google APIs whose resources carry byte fields.
    Credentials come from, in order: the token cache, an OAuth installed app flow
    using the client secrets file, then application default credentials
    (GOOGLE_APPLICATION_CREDENTIALS etc).  Services are built once per
    name:version and reused.

    One authenticated session per process is all that's wanted so this is a
    module singleton, and modules needing a service get it with the
    decorator or a partial on get_service.
    """

    _SCOPES = {
        "firebase": "https://www.googleapis.com/auth/firebase",
        "firebase-ro": "https://www.googleapis.com/auth/firebase.readonly",
        "cloud-platform": "https://www.googleapis.com/auth/cloud-platform",
        "cloud-platform-ro": "https://www.googleapis.com/auth/cloud-platform.read-only",
        "contacts": "https://www.googleapis.com/auth/contacts",
        "contacts-ro": "https://www.googleapis.com/auth/contacts.readonly",
        "openid": "openid",
        "email": "email",
        "profile": "profile",
    }
    _SCOPE_URL_PREFIX = "https://www.googleapis.com/"

    _DEFAULT_AUTH_PROMPT_MSG = "Please visit this URL to authorize this application: {url}"
    _DEFAULT_AUTH_FLOW_SUCCESS_MSG = "Authorization complete, you may close this window."
    _DEFAULT_SECRETS = Path.home() / "gwswire_client_secrets.json"
    _DEFAULT_CACHE = Path.home() / "gwswire_tokens.json"

    def __init__(self) -> None:
        self.reset()

    def __bool__(self) -> bool:
        """True if we are connected and authenticated"""
        return self.connected

    def __str__(self) -> str:
        if self.connected:
            return f"Connected:{str(self.session_scopes)}"
        return f"Disconnected:{str(self._scopes)}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @classmethod
    def get_scope(cls, scope: str) -> str:
        """
        Get a scope based on simplified label.
        A raw URL will also be accepted.  Unknown labels give "".
        """
        s = str(scope)
        sc = cls._SCOPES.get(s, "")
        if not sc and s.startswith(cls._SCOPE_URL_PREFIX):
            sc = s
        return sc

    @classmethod
    def _scope_list(cls, value) -> list[str]:
        vals = [value] if isinstance(value, str) or not isinstance(value, Iterable) else value
        slist = []
        for v in vals:
            s = cls.get_scope(str(v))
            if s and s not in slist:
                slist.append(s)
            elif not s:
                logger.warning("ignoring unknown scope %s", v)
        return slist

    @property
    def client_secrets(self) -> Path:
        """Path to the OAuth client secrets file downloaded from the cloud console."""
        return self._secrets

    @client_secrets.setter
    def client_secrets(self, value: Path|str) -> None:
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self._secrets:
            self._secrets = val
            if self.connected:
                self.connect()

    @property
    def cred_cache(self) -> Path:
        """Path to the local token cache so a full authorization isn't needed each run."""
        return self._cache

    @cred_cache.setter
    def cred_cache(self, value: Path|str) -> None:
        val = value if isinstance(value, Path) else Path(str(value))
        if val != self._cache:
            self._cache = val
            if self.connected:
                self.connect()

    @property
    def connected(self) -> bool:
        return bool(self._creds) and bool(self._creds.valid)

    @property
    def session_scopes(self) -> list[str]:
        """
        Scopes granted for this session, as opposed to self.scopes which is what
        is (or will be) requested.
        """
        if self.connected:
            return list(self._creds.scopes or [])
        return []

    @property
    def scopes(self) -> list[str]:
        return self._scopes

    @scopes.setter
    def scopes(self, value: None|list[str]|str) -> None:
        """
        Replace the requested scopes.  Reconnects if connected and a new scope
        isn't covered by the current session.
        """
        self._scopes = self._scope_list(value) if value is not None else []
        if self._scopes and self.connected:
            self.refresh()
        else:
            self._creds = None
            self._services = {}

    def append_scopes(self, *args) -> bool:
        """
        Add to the requested scopes.  Modules are expected to add what they need.
        """
        for a in args:
            for s in self._scope_list(a):
                if s not in self._scopes:
                    self._scopes.append(s)
        return self.refresh()

    def scope_in_session(self, scope: str) -> bool:
        s = self.get_scope(scope)
        return bool(s) and self.connected and (s in self.session_scopes)

    @property
    def creds(self) -> Credentials|None:
        return self._creds

    @property
    def services(self) -> dict[str, Resource]:
        return self._services

    @property
    def config(self) -> dict:
        """
        All configuration state as a dict, for pushing into a json/toml/ini file.
        """
        return {
            'secrets': str(self._secrets),
            'cache': str(self._cache),
            'scopes': list(self._scopes),
            'server': self.auth_server,
            'port': self.auth_port,
            'auth_prompt_msg': self.auth_prompt_msg,
            'flow_success_msg': self.auth_flow_success_msg,
        }

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict as read from a config file.
        Missing keys leave the current value alone.
        """
        reconnect = False
        v = config.get('port', None)
        if v is not None:
            self.auth_port = int(v)
        v = config.get('server', None)
        if v is not None:
            self.auth_server = str(v)
        v = config.get('scopes', [])
        if v:
            self._scopes = self._scope_list(v)
            reconnect = True
        v = config.get('cache', None)
        if v is not None:
            self._cache = Path(v)
            reconnect = True
        v = config.get('secrets', None)
        if v is not None:
            self._secrets = Path(v)
            reconnect = True
        v = config.get('auth_prompt_msg', None)
        if v is not None:
            self.auth_prompt_msg = str(v)
        v = config.get('flow_success_msg', None)
        if v is not None:
            self.auth_flow_success_msg = str(v)
        if reconnect and self.connected:
            self.connect()

    @property
    def developer_key(self) -> str|None:
        return self._developer_key

    @developer_key.setter
    def developer_key(self, value: str|None) -> None:
        v = value if value is None else str(value)
        if v != self._developer_key:
            self._services = {}
            self._developer_key = v

    def reset(self) -> None:
        """Reset all connection state to defaults."""
        self._secrets = self._DEFAULT_SECRETS
        self._cache = self._DEFAULT_CACHE
        self._discovery_cache = discovery_cache.autodetect()
        self._creds = None
        self._scopes = []
        self._services = {}
        self._developer_key = None
        self.auth_server = 'localhost'
        self.auth_port = 0
        self.auth_prompt_msg = self._DEFAULT_AUTH_PROMPT_MSG
        self.auth_flow_success_msg = self._DEFAULT_AUTH_FLOW_SUCCESS_MSG

    def refresh(self) -> bool:
        """
        Reconnect if any requested scope isn't in the current session.
        """
        scopes_accounted = all(s in self.session_scopes for s in self._scopes)
        if self.connected and not scopes_accounted:
            return self.connect()
        return True

    def _load_cache(self, requested_scopes: list[str]) -> None:
        if not (self._cache.exists() and self._cache.is_file()):
            return
        cf = self._cache.resolve()
        with open(cf, 'r', encoding='utf-8') as f:
            j = json.load(f)
        # a refresh won't widen the scopes so a cache made for fewer is useless
        if not all(s in j.get('scopes', []) for s in requested_scopes):
            logger.info("token cache %s lacks requested scopes, discarding", cf)
            self._cache.unlink()
            return
        self._creds = Credentials.from_authorized_user_file(str(cf), requested_scopes)

    def connect(self) -> bool:
        """
        Establish a new authenticated session, saving refreshable credentials
        in the cache file on success.
        """
        self._creds = None
        self._services = {}
        if not self._scopes:
            return False
        requested_scopes = copy.copy(self._scopes)
        self._load_cache(requested_scopes)
        if not self.connected and self._creds and self._creds.refresh_token:
            try:
                self._creds.refresh(Request())
            except google.auth.exceptions.RefreshError as e:
                logger.warning("failed to refresh stored creds: %s...deleting cred cache and re-authorizing", e)
            finally:
                if not self.connected:
                    self._cache.unlink(missing_ok=True)

        if not self.connected:
            if self._secrets.exists() and self._secrets.is_file():
                flow = InstalledAppFlow.from_client_secrets_file(str(self._secrets), requested_scopes)
                self._creds = flow.run_local_server(host=self.auth_server, port=self.auth_port,
                                                    authorization_prompt_message=self.auth_prompt_msg,
                                                    success_message=self.auth_flow_success_msg)
            else:
                try:
                    self._creds, _ = google.auth.default(scopes=requested_scopes)
                except google.auth.exceptions.DefaultCredentialsError as e:
                    logger.warning("no client secrets at %s and no default credentials: %s", self._secrets, e)
                    self._creds = None
                else:
                    # default creds start out without a token
                    if self._creds is not None and not self._creds.valid:
                        self._creds.refresh(Request())

        if self.connected and getattr(self._creds, 'refresh_token', None):
            user_info = {'refresh_token': self._creds.refresh_token, 'client_id': self._creds.client_id,
                         'client_secret': self._creds.client_secret, 'scopes': requested_scopes}
            with open(self._cache.resolve(), 'w', encoding='utf-8') as f:
                json.dump(user_info, f, ensure_ascii=False, indent=2)
        return self.connected

    def get_service(self, name: str, version: str) -> Resource|None:
        """
        Build the requested service if not already available, connecting if required.
        Returns None if no connection could be made.
        """
        if not self.connected:
            self.connect()
        if not self.connected:
            return None
        sid = f'{name}:{version}'
        s = self._services.get(sid, None)
        if s is None:
            logger.debug("building service %s", sid)
            s = build(name, version, credentials=self._creds,
                      developerKey=self._developer_key, cache=self._discovery_cache)
            self._services[sid] = s
        return s

    def require_service(self, name: str, version: str) -> Resource:
        """
        get_service for callers that can't do anything without one.
        """
        s = self.get_service(name, version)
        if s is None:
            raise RuntimeError(f"no authenticated session for {name}:{version}")
        return s


gws =_GoogleApiAccess()


def service(name: str, version: str):
    """
    Decorator delivering the named service to a function as the 'service' kwarg.
    param: name: service name
    param: version: service version
    """
    def _inner_decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            kwargs['service'] = gws.get_service(name, version)
            return f(*args, **kwargs)
        return wrapped
    return _inner_decorator
