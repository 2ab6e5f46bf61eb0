"""
Admin session: the bearer token and where it is persisted.

The session is passed explicitly to the API client; nothing reads the token
from ambient storage.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from .config import TOKEN_FILE

logger = logging.getLogger(__name__)


class TokenStore:
    """Keeps the token in a small JSON file so it survives restarts."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else TOKEN_FILE

    def load(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self.path, e)
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token}))

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class MemoryTokenStore:
    def __init__(self, token: Optional[str] = None):
        self.token = token

    def load(self) -> Optional[str]:
        return self.token

    def save(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


def token_claims(token: str) -> Dict[str, Any]:
    """Read JWT claims without verifying the signature; {} for opaque tokens."""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return {}


def is_expired(token: str, now: Optional[datetime] = None) -> bool:
    exp = token_claims(token).get("exp")
    if exp is None:
        return False
    now = now or datetime.now(timezone.utc)
    return datetime.fromtimestamp(exp, timezone.utc) <= now


class Session:
    def __init__(self, store=None):
        self.store = store if store is not None else TokenStore()
        self._token = self.store.load()
        if self._token and is_expired(self._token):
            logger.info("Stored admin token has expired, discarding it")
            self.clear()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def claims(self) -> Dict[str, Any]:
        return token_claims(self._token) if self._token else {}

    @property
    def is_admin(self) -> bool:
        return bool(self.claims.get("is_admin"))

    def set_token(self, token: str) -> None:
        self._token = token
        self.store.save(token)

    def clear(self) -> None:
        self._token = None
        self.store.clear()

    def auth_headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}
