from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from appdirs import user_log_dir
from dotenv import load_dotenv

QUOTE_CONFLICT_POLICIES = {"primary_wins", "reject"}


@dataclass
class Settings:
    database_url: str = ""
    log_dir: str = field(default_factory=lambda: user_log_dir("quote_pipeline"))
    log_level: str = "INFO"
    detailed_logging: bool = False
    log_json: bool = False
    merge_lease_seconds: int = 300
    quote_conflict_policy: str = "primary_wins"
    api_host: str = "127.0.0.1"
    api_port: int = 8000


def _parse_policy(raw: str | None) -> str:
    value = (raw or "primary_wins").strip().lower()
    if value not in QUOTE_CONFLICT_POLICIES:
        raise ValueError(
            f"QUOTE_CONFLICT_POLICY должен быть одним из {sorted(QUOTE_CONFLICT_POLICIES)}, "
            f"получено {raw!r}"
        )
    return value


@lru_cache()
def get_settings() -> Settings:
    dotenv_path = Path(__file__).resolve().parent / ".env"
    load_dotenv(dotenv_path)

    return Settings(
        database_url=os.getenv("DATABASE_URL", ""),
        log_dir=os.getenv("LOG_DIR") or user_log_dir("quote_pipeline"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        detailed_logging=os.getenv("DETAILED_LOGGING", "0").lower() in {"1", "true", "yes", "on"},
        log_json=os.getenv("LOG_JSON", "0").lower() in {"1", "true", "yes", "on"},
        merge_lease_seconds=int(os.getenv("MERGE_LEASE_SECONDS", "300")),
        quote_conflict_policy=_parse_policy(os.getenv("QUOTE_CONFLICT_POLICY")),
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )
