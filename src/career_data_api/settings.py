from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from dotenv import dotenv_values
from pydantic_settings import BaseSettings, SettingsConfigDict

from career_data_api.user_config import load_user_config

_ENV_KEYS = {
    "DATABASE_URL": "sql_db_url",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "OPENAI_API_KEY": "openai_api_key",
    "LLM_PROVIDER": "llm_provider",
    "LLM_MODEL": "llm_model",
    "API_ACCESS_KEY": "api_access_key",
    "LOG_LEVEL": "log_level",
    "LOG_JSON": "log_json",
    "PORT": "port",
    "CORS_ORIGINS": "cors_origins",
}


def _json_settings_source() -> Dict[str, Any]:
    return load_user_config()


def _limited_env_settings_source() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    env.update(dotenv_values(".env"))
    env.update(os.environ)

    data: Dict[str, Any] = {}
    for env_key, field in _ENV_KEYS.items():
        value = env.get(env_key)
        if value not in (None, ""):
            data[field] = value
    return data


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    sql_db_url: str = "sqlite:///data/career.db"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_recycle_s: int = 1800

    llm_provider: Literal["anthropic", "openai"] = "anthropic"
    llm_model: str | None = None
    max_tokens: int = 4096
    llm_timeout_s: float = 120.0

    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    api_access_key: str | None = None
    cors_origins: str = "*"
    port: int = 8000

    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        return (
            init_settings,
            _json_settings_source,
            _limited_env_settings_source,
            file_secret_settings,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
