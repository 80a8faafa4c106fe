from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from .accounts import AccountStore, AuthError
from .analysis.client import AnalysisError
from .analysis.images import ImagePayload
from .analysis.models import AnalysisResult
from .app_state import AppStateStore
from .config import AppConfig
from .health.metrics import compute_test
from .health.records import HealthTestInput, HealthTestResult
from .i18n import t
from .storage.records import RecordStore

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    def analyze(self, image_bytes: bytes, mime_type: str, language: str) -> AnalysisResult: ...


@dataclass
class AnalysisOutcome:
    result: AnalysisResult
    saved_record: Optional[Dict[str, Any]] = None


class FoodCoachApp:
    def __init__(
        self,
        state: AppStateStore,
        accounts: AccountStore,
        records: RecordStore,
        analyzer: Analyzer,
    ) -> None:
        self.state = state
        self.accounts = accounts
        self.records = records
        self.analyzer = analyzer
        self._auth_token = accounts.subscribe(state.set_user)

    @staticmethod
    def from_config(config: AppConfig) -> "FoodCoachApp":
        from .analysis.client import VisionAnalysisClient

        analyzer = VisionAnalysisClient(
            api_key=config.openai_api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            detail=config.image_detail,
        )
        state = AppStateStore(persist_path=config.state_path)
        if not config.state_path.exists():
            state.state.language = config.default_language
        return FoodCoachApp(
            state=state,
            accounts=AccountStore(root=config.accounts_dir),
            records=RecordStore(root=config.records_dir),
            analyzer=analyzer,
        )

    def close(self) -> None:
        self.accounts.unsubscribe(self._auth_token)

    @property
    def language(self) -> str:
        return self.state.state.language

    def analyze_image(self, payload: Optional[ImagePayload]) -> AnalysisOutcome:
        if payload is None:
            raise AnalysisError(t(self.language, "error_select_image"))
        try:
            result = self.analyzer.analyze(payload.data, payload.mime_type, self.language)
        except AnalysisError:
            raise
        except Exception as exc:
            logger.exception("Analysis failed")
            raise AnalysisError(t(self.language, "error_analysis_failed")) from exc

        outcome = AnalysisOutcome(result=result)
        user = self.state.state.user
        if user is not None:
            # A failed save does not fail the analysis.
            try:
                image_url = self.records.upload_image(payload, user.id)
                outcome.saved_record = self.records.insert_analysis(user.id, image_url, result)
                logger.info("Analysis saved for user %s", user.id)
            except (OSError, ValueError) as exc:
                logger.error("Failed to save analysis: %s", exc)
        return outcome

    def record_health_test(self, result: HealthTestResult) -> Dict[str, Any]:
        user = self.state.state.user
        if user is None:
            raise AuthError(t(self.language, "error_login_required"))
        return self.records.insert_health_test(user.id, result)

    def run_health_test(self, inputs: HealthTestInput, save: bool = True) -> HealthTestResult:
        result = compute_test(inputs)
        if save and self.state.state.user is not None:
            self.record_health_test(result)
        return result
