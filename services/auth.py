"""
Marathon Scoreboard - Authentication
Admin sessions verified against hashed credentials in Streamlit secrets
"""

import hashlib
import hmac
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping, Union

from loguru import logger

from .errors import AuthError


@dataclass(frozen=True)
class Anonymous:
    """Read-only visitor"""
    is_admin = False


@dataclass(frozen=True)
class Authenticated:
    """Signed-in administrator"""
    identifier: str
    signed_in_at: str
    is_admin = True


Session = Union[Anonymous, Authenticated]
SessionCallback = Callable[[Session], None]


def hash_secret(secret: str) -> str:
    """SHA-256 hex digest, the form stored under [admins] in secrets"""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


class SecretsIdentityProvider:
    """
    Identity provider for one browser session.

    Accounts map an identifier (email) to the SHA-256 digest of its
    password. Listeners are told about every session change.
    """

    def __init__(self, accounts: Mapping[str, str]):
        # Identifiers compare case-insensitively, like email addresses
        self._accounts: Dict[str, str] = {k.strip().lower(): v.lower() for k, v in accounts.items()}
        self._session: Session = Anonymous()
        self._listeners: Dict[int, SessionCallback] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    @property
    def session(self) -> Session:
        return self._session

    def authenticate(self, identifier: str, secret: str) -> Authenticated:
        key = (identifier or "").strip().lower()
        expected = self._accounts.get(key)
        supplied = hash_secret(secret or "")

        if expected is None or not hmac.compare_digest(expected, supplied):
            logger.warning("Failed admin login attempt")
            raise AuthError()

        session = Authenticated(identifier=key, signed_in_at=datetime.now(timezone.utc).isoformat())
        self._set_session(session)
        logger.info(f"Admin signed in: {key}")
        return session

    def end_session(self) -> None:
        if isinstance(self._session, Authenticated):
            logger.info(f"Admin signed out: {self._session.identifier}")
        self._set_session(Anonymous())

    def subscribe_to_session_changes(self, callback: SessionCallback) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = callback

        def unsubscribe():
            with self._lock:
                self._listeners.pop(token, None)

        callback(self._session)
        return unsubscribe

    def _set_session(self, session: Session) -> None:
        with self._lock:
            self._session = session
            listeners = list(self._listeners.values())
        for callback in listeners:
            callback(session)
