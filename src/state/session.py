from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional, Union

import aiosqlite

from db.kv import LocalStorage
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

Role = Literal["customer", "farmer", "admin"]
ROLES = ("customer", "farmer", "admin")


class MalformedSessionError(ValueError):
    pass


@dataclass(frozen=True)
class Session:
    id: Union[int, str]
    username: str
    email: str
    role: Role
    token: str

    @classmethod
    def from_payload(cls, data: Any) -> "Session":
        """
        Build a session from an API response or a persisted record.
        Raises MalformedSessionError unless every field is present and sane.
        """
        if not isinstance(data, dict):
            raise MalformedSessionError("session payload must be an object")

        missing = [
            f
            for f in ("id", "username", "email", "role", "token")
            if data.get(f) in (None, "")
        ]
        if missing:
            raise MalformedSessionError(f"session payload missing {', '.join(missing)}")
        if isinstance(data["id"], bool) or not isinstance(data["id"], (int, str)):
            raise MalformedSessionError(f"invalid session id {data['id']!r}")
        if data["role"] not in ROLES:
            raise MalformedSessionError(f"unknown role {data['role']!r}")

        return cls(
            id=data["id"],
            username=str(data["username"]),
            email=str(data["email"]),
            role=data["role"],
            token=str(data["token"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SessionStore:
    """
    Who is logged in, durable across restarts.

    State is either no session or a complete Session. Reads are plain
    attribute access; every mutation writes through to local storage.
    """

    def __init__(self, storage: Optional[LocalStorage] = None, key: str = config.SESSION_KEY):
        self._storage = storage or LocalStorage()
        self._key = key
        self._session: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def role(self) -> Optional[Role]:
        return self._session.role if self._session else None

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    def has_role(self, *roles: str) -> bool:
        return self._session is not None and self._session.role in roles

    async def restore(self) -> Optional[Session]:
        try:
            raw = await self._storage.get_item(self._key)
        except aiosqlite.Error as e:
            _logger.error(f"Local storage unreadable, starting logged out: {e}")
            self._session = None
            return None
        if raw is None:
            self._session = None
            return None

        try:
            self._session = Session.from_payload(json.loads(raw))
        except (ValueError, TypeError, RecursionError) as e:
            # json.JSONDecodeError and MalformedSessionError are both ValueErrors
            _logger.warning(f"Discarding malformed session record: {e}")
            self._session = None
            await self._storage.remove_item(self._key)
            return None

        _logger.info(f"Restored session for {self._session.username}")
        return self._session

    async def login(self, session_data: Union[Session, Dict[str, Any]]) -> Session:
        session = (
            session_data
            if isinstance(session_data, Session)
            else Session.from_payload(session_data)
        )
        self._session = session
        await self._storage.set_item(self._key, json.dumps(session.to_dict()))
        _logger.info(f"Logged in as {session.username} ({session.role})")
        return session

    async def logout(self) -> None:
        if self._session is not None:
            _logger.info(f"Logged out {self._session.username}")
        self._session = None
        await self._storage.remove_item(self._key)
