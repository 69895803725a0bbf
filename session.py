"""
Login check and persistence of the logged-in user
"""
from __future__ import annotations
import json
import logging
import os
from typing import Iterable, Optional

from config import dict_to_user, user_to_dict
from errors import AuthError
from models import User
from utils import app_dir

_LOGGER = logging.getLogger(__name__)


def authenticate(name: str, password: str, users: Iterable[User]) -> User:
    """
    Return the first user whose name and password both match exactly.
    Raises AuthError otherwise, without saying which part was wrong.
    """
    for u in users:
        if u.name == name and u.password == password:
            return u
    raise AuthError()


class SessionStore:
    """Where the logged-in user survives a restart"""

    def restore(self) -> Optional[User]:
        raise NotImplementedError

    def save(self, user: User) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    """Keeps the user for the lifetime of the process only"""

    def __init__(self, user: Optional[User] = None):
        self._user = user

    def restore(self) -> Optional[User]:
        return self._user

    def save(self, user: User) -> None:
        self._user = user

    def clear(self) -> None:
        self._user = None


class FileSessionStore(SessionStore):
    """JSON file in the application data directory"""

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.path.join(app_dir(), "session.json")

    def restore(self) -> Optional[User]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as ex:
            _LOGGER.warning("Ignoring unreadable session file %s: %s", self.path, ex)
            return None
        if not isinstance(data, dict) or not data.get("name"):
            _LOGGER.warning("Ignoring malformed session file %s", self.path)
            return None
        return dict_to_user(data)

    def save(self, user: User) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(user_to_dict(user), f, ensure_ascii=False, indent=2)

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
