"""Client session storage"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
USERNAME_KEY = "username"
LOGGED_IN_KEY = "loggedIn"


class SessionStore:
    """
    Key/value session holding the auth token and username.

    Kept in memory; when a path is given the session is also written to a
    JSON file so that separate command line invocations share it.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._data: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        if self._path is None:
            return
        if not self._data:
            self._path.unlink(missing_ok=True)
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._data), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def clear(self) -> None:
        """Forget everything, including the persisted copy"""
        self._data = {}
        self._save()

    @property
    def token(self) -> Optional[str]:
        return self.get(TOKEN_KEY)

    @property
    def username(self) -> Optional[str]:
        return self.get(USERNAME_KEY)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token) and self.get(LOGGED_IN_KEY) == "true"

    def start(self, token: str, username: str) -> None:
        """Store a fresh login"""
        self._data[TOKEN_KEY] = token
        self._data[LOGGED_IN_KEY] = "true"
        self._data[USERNAME_KEY] = username
        self._save()
