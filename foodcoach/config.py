from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "foodcoach.yaml"
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

_ENV_OVERRIDES = {
    "OPENAI_API_KEY": "openai_api_key",
    "FOODCOACH_MODEL": "model",
    "FOODCOACH_DATA_DIR": "data_dir",
    "FOODCOACH_LANGUAGE": "default_language",
}


class AppConfig(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 2000
    image_detail: Literal["low", "high", "auto"] = "low"
    default_language: Literal["fi", "en"] = "fi"
    openai_api_key: Optional[str] = Field(default=None, repr=False)

    @property
    def accounts_dir(self) -> Path:
        return self.data_dir / "accounts"

    @property
    def records_dir(self) -> Path:
        return self.data_dir / "records"

    @property
    def state_path(self) -> Path:
        return self.data_dir / "app_state.json"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        logger.warning("Ignoring unreadable config file %s", path)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_config(path: Optional[Path] = None, env: Optional[Dict[str, str]] = None) -> AppConfig:
    if env is None:
        load_dotenv()
        env = dict(os.environ)
    data = _load_yaml(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    for var, key in _ENV_OVERRIDES.items():
        value = (env.get(var) or "").strip()
        if value:
            data[key] = value
    while True:
        try:
            return AppConfig.model_validate(data)
        except ValidationError as exc:
            bad = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
            logger.warning("Invalid config values for %s, using defaults for them", ", ".join(sorted(bad)))
            if not bad & set(data):
                # Nothing left to drop that the model complains about.
                return AppConfig()
            data = {k: v for k, v in data.items() if k not in bad}
