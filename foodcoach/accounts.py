from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from .utils.time import iso_now

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthError(RuntimeError):
    """Raised for failed sign-in, sign-up or missing sessions."""


@dataclass
class User:
    id: str
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""

    def display_name(self) -> str:
        meta = self.user_metadata or {}
        return str(meta.get("name") or meta.get("full_name") or self.email.split("@")[0])

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            id=str(data.get("id", "")),
            email=str(data.get("email", "")),
            user_metadata=dict(data.get("user_metadata") or {}),
            created_at=str(data.get("created_at", "")),
        )


AuthSubscriber = Callable[[Optional[User]], None]


def _normalize_email(email: str) -> str:
    text = (email or "").strip().lower()
    if "@" not in text or text.startswith("@") or text.endswith("@"):
        raise AuthError("A valid e-mail address is required.")
    return text


@dataclass
class AccountStore:
    root: Path
    _subscribers: dict[int, AuthSubscriber] = field(default_factory=dict, init=False, repr=False)
    _next_token: int = field(default=1, init=False, repr=False)

    def __post_init__(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def _users_file(self) -> Path:
        return self.root / "users.json"

    @property
    def _session_file(self) -> Path:
        return self.root / "session.txt"

    def _load_users(self) -> dict[str, dict]:
        if not self._users_file.exists():
            return {}
        try:
            data = json.loads(self._users_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable users file %s", self._users_file)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, dict)}

    def _save_users(self, users: dict[str, dict]) -> None:
        self._users_file.write_text(json.dumps(users, indent=2), encoding="utf-8")

    def sign_up(self, email: str, password: str, full_name: str = "") -> User:
        key = _normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        users = self._load_users()
        if key in users:
            raise AuthError("An account with this e-mail already exists.")
        user = User(
            id=uuid.uuid4().hex,
            email=key,
            user_metadata={"full_name": full_name.strip()} if full_name.strip() else {},
            created_at=iso_now(),
        )
        record = user.to_dict()
        record["password_hash"] = generate_password_hash(password)
        users[key] = record
        self._save_users(users)
        logger.info("Created account %s", user.id)
        return user

    def sign_in(self, email: str, password: str) -> User:
        key = _normalize_email(email)
        record = self._load_users().get(key)
        if not record or not check_password_hash(str(record.get("password_hash", "")), password or ""):
            raise AuthError("Invalid e-mail or password.")
        user = User.from_dict(record)
        self._session_file.write_text(user.id, encoding="utf-8")
        self._emit(user)
        return user

    def sign_out(self) -> None:
        self._session_file.unlink(missing_ok=True)
        self._emit(None)

    def current_user(self) -> Optional[User]:
        if not self._session_file.exists():
            return None
        user_id = self._session_file.read_text(encoding="utf-8").strip()
        if not user_id:
            return None
        for record in self._load_users().values():
            if str(record.get("id")) == user_id:
                return User.from_dict(record)
        # Session points at a deleted account.
        self._session_file.unlink(missing_ok=True)
        return None

    def require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise AuthError("Sign in first.")
        return user

    def subscribe(self, callback: AuthSubscriber, emit_initial: bool = True) -> int:
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        if emit_initial:
            callback(self.current_user())
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def _emit(self, user: Optional[User]) -> None:
        for callback in list(self._subscribers.values()):
            try:
                callback(user)
            except Exception:
                logger.exception("Auth subscriber failed")
