from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Optional

from .accounts import User
from .analysis.prompts import LANGUAGES

logger = logging.getLogger(__name__)

ModalType = Literal["about", "terms", "privacy", "auth", "dashboard", "health_tests"]
MODAL_TYPES = ("about", "terms", "privacy", "auth", "dashboard", "health_tests")
DEFAULT_LANGUAGE = "fi"


@dataclass
class ApplicationState:
    user: Optional[User] = None
    language: str = DEFAULT_LANGUAGE
    active_modal: Optional[str] = None
    cookie_consent: bool = False


StateSubscriber = Callable[[ApplicationState], None]


class AppStateStore:
    def __init__(
        self,
        initial_state: Optional[ApplicationState] = None,
        persist_path: Optional[Path] = None,
    ) -> None:
        self._state = initial_state or ApplicationState()
        self._subscribers: dict[int, StateSubscriber] = {}
        self._next_subscriber_id = 1
        self._persist_path = persist_path
        self._load_persisted_state()

    @property
    def state(self) -> ApplicationState:
        return self._state

    def snapshot(self) -> ApplicationState:
        return copy.deepcopy(self._state)

    def subscribe(self, callback: StateSubscriber, emit_initial: bool = True) -> int:
        token = self._next_subscriber_id
        self._next_subscriber_id += 1
        self._subscribers[token] = callback
        if emit_initial:
            callback(self.snapshot())
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers.values()):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("State subscriber failed")

    def set_user(self, user: Optional[User]) -> None:
        self._state.user = copy.deepcopy(user) if user is not None else None
        if user is None and self._state.active_modal == "dashboard":
            self._state.active_modal = None
        self._emit()

    def set_language(self, language: str) -> None:
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language!r}")
        self._state.language = language
        self._persist()
        self._emit()

    def toggle_language(self) -> str:
        self.set_language("en" if self._state.language == "fi" else "fi")
        return self._state.language

    def open_modal(self, kind: str) -> None:
        if kind not in MODAL_TYPES:
            raise ValueError(f"Unknown modal: {kind!r}")
        self._state.active_modal = kind
        self._emit()

    def close_modal(self) -> None:
        self._state.active_modal = None
        self._emit()

    def accept_cookies(self) -> None:
        self._state.cookie_consent = True
        self._persist()
        self._emit()

    def _persist(self) -> None:
        if self._persist_path is None:
            return
        try:
            self._persist_path.parent.mkdir(parents=True, exist_ok=True)
            payload = {
                "schema_version": 1,
                "language": self._state.language,
                "cookie_consent": self._state.cookie_consent,
            }
            self._persist_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            logger.warning("Could not persist app state to %s", self._persist_path)

    def _load_persisted_state(self) -> None:
        if self._persist_path is None or not self._persist_path.exists():
            return
        try:
            payload = json.loads(self._persist_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(payload, dict):
            return
        language = payload.get("language")
        if language in LANGUAGES:
            self._state.language = str(language)
        if isinstance(payload.get("cookie_consent"), bool):
            self._state.cookie_consent = payload["cookie_consent"]
