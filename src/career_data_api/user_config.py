from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

DEFAULT_USER_CONFIG_PATH = "config/user_settings.json"

ALLOWED_KEYS = {
    "llm_provider",
    "llm_model",
    "max_tokens",
    "llm_timeout_s",
    "log_level",
    "log_json",
}


def get_user_config_path() -> str:
    return os.environ.get("CAREER_SETTINGS_FILE", DEFAULT_USER_CONFIG_PATH)


def load_user_config(path: str | None = None) -> Dict[str, Any]:
    config_path = Path(path or get_user_config_path())
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {key: data[key] for key in ALLOWED_KEYS if key in data}
