from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    github_token: str | None
    github_user: str | None
    github_api_url: str
    github_timeout_s: float
    github_default_branch: str
    upload_dir: str
    staging_dir: str
    upload_max_bytes: int
    upload_verify_signature: bool
    upload_retention_hours: int
    publish_rollback_on_failure: bool
    rate_limit_enabled: bool
    generate_rate_limit: str
    cv_screen_rate_limit: str
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None

    @property
    def github_configured(self) -> bool:
        return bool(self.github_token and self.github_user)


settings = Settings(
    github_token=_get_env("GITHUB_TOKEN"),
    github_user=_get_env("GITHUB_USER"),
    github_api_url=(_get_env("GITHUB_API_URL", "https://api.github.com") or "https://api.github.com").rstrip("/"),
    github_timeout_s=_get_env_float("GITHUB_TIMEOUT_S", 30.0),
    github_default_branch=_get_env("GITHUB_DEFAULT_BRANCH", "main") or "main",
    upload_dir=_get_env("UPLOAD_DIR", "data/uploads") or "data/uploads",
    staging_dir=_get_env("STAGING_DIR", "data/temp") or "data/temp",
    upload_max_bytes=_get_env_int("UPLOAD_MAX_BYTES", 5 * 1024 * 1024),
    upload_verify_signature=_get_env_bool("UPLOAD_VERIFY_SIGNATURE", True),
    upload_retention_hours=_get_env_int("UPLOAD_RETENTION_HOURS", 24),
    publish_rollback_on_failure=_get_env_bool("PUBLISH_ROLLBACK_ON_FAILURE", False),
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    generate_rate_limit=_get_env("GENERATE_RATE_LIMIT", "100/15 minutes") or "100/15 minutes",
    cv_screen_rate_limit=_get_env("CV_SCREEN_RATE_LIMIT", "20/minute") or "20/minute",
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "https://eportfoliogenerator.netlify.app",
        ],
    ),
    cors_allow_origin_regex=(_get_env("CORS_ALLOW_ORIGIN_REGEX") or "").strip() or None,
)

if settings.upload_max_bytes <= 0:
    raise RuntimeError("UPLOAD_MAX_BYTES must be a positive number of bytes.")
