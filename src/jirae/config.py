from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import json

from jirae.models import Credentials


_DEFAULT_TIMEOUT_SECONDS = 30.0

EDITOR_ENV = "EDITOR"
USER_ENV = "JIRA_USER"
TOKEN_ENV = "JIRA_TOKEN"
BASE_URL_ENV = "JIRA_URL"
TIMEOUT_ENV = "JIRAE_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class AppConfig:
    editor_command: str
    credentials: Credentials
    base_url: str | None = None
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS


class ConfigError(ValueError):
    pass


def load_config(environ: Mapping[str, str]) -> AppConfig:
    # Checked in this order so the first missing variable is the one reported.
    editor_command = _require_env(environ, EDITOR_ENV)
    principal = _require_env(environ, USER_ENV)
    secret = _require_env(environ, TOKEN_ENV)

    base_url = _optional_env(environ, BASE_URL_ENV)
    if base_url is not None:
        base_url = base_url.rstrip("/")
        if not base_url.startswith(("https://", "http://")):
            raise ConfigError(f"{BASE_URL_ENV} must be an http(s) URL, got {base_url!r}")

    return AppConfig(
        editor_command=editor_command,
        credentials=Credentials(principal=principal, secret=secret),
        base_url=base_url,
        timeout_seconds=_positive_float_with_default(
            environ, TIMEOUT_ENV, _DEFAULT_TIMEOUT_SECONDS
        ),
    )


def parse_extra_fields(raw: str) -> dict[str, object]:
    """Parse the JSON object given with ``--fields`` for new comments."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"--fields is not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ConfigError(f"--fields must be a JSON object, got {type(value).__name__}")
    return value


def _require_env(environ: Mapping[str, str], key: str) -> str:
    value = _optional_env(environ, key)
    if value is None:
        raise ConfigError(f"{key} environment variable is not set")
    return value


def _optional_env(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _positive_float_with_default(
    environ: Mapping[str, str], key: str, default: float
) -> float:
    raw = _optional_env(environ, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be > 0")
    return value
