from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from vision_relay.errors import ConfigError

DEFAULT_PORT = 8080
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"

VALID_PROMPT_MODES = {"text", "json"}


@dataclass(frozen=True)
class RelayConfig:
    """
    Process-wide settings, read once at startup and never mutated.

    Passed explicitly to every component that needs a credential.
    """

    telegram_bot_token: str
    openai_api_key: str

    chat_id: Optional[int] = None
    port: int = DEFAULT_PORT
    openai_model: str = DEFAULT_MODEL
    prompt_mode: str = "text"
    render_dpi: int = 300
    send_rendered_page: bool = True
    request_timeout: float = 30.0
    max_upload_bytes: int = 10 * 1024 * 1024
    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # Keep secrets out of logs.
        return (
            f"RelayConfig(chat_id={self.chat_id!r}, port={self.port!r}, "
            f"openai_model={self.openai_model!r}, prompt_mode={self.prompt_mode!r})"
        )


def _int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_config(env: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """
    Build a RelayConfig from the environment.

    When `env` is omitted a local .env file is loaded first (if present) and
    os.environ is used. Raises ConfigError when TELEGRAM_BOT_TOKEN or
    OPENAI_API_KEY is missing, or when a typed value cannot be parsed.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    token = (env.get("TELEGRAM_BOT_TOKEN") or "").strip()
    api_key = (env.get("OPENAI_API_KEY") or "").strip()
    if not token or not api_key:
        raise ConfigError(
            "Missing required environment variables: TELEGRAM_BOT_TOKEN and OPENAI_API_KEY"
        )

    prompt_mode = (env.get("EXTRACTION_PROMPT") or "text").strip().lower()
    if prompt_mode not in VALID_PROMPT_MODES:
        raise ConfigError(f"EXTRACTION_PROMPT must be one of {sorted(VALID_PROMPT_MODES)}")

    render_dpi = _int(env, "RENDER_DPI", 300)
    if render_dpi <= 0:
        raise ConfigError("RENDER_DPI must be positive")

    return RelayConfig(
        telegram_bot_token=token,
        openai_api_key=api_key,
        chat_id=_int(env, "TELEGRAM_CHAT_ID", None),
        port=_int(env, "PORT", DEFAULT_PORT),
        openai_model=(env.get("OPENAI_MODEL") or DEFAULT_MODEL).strip(),
        prompt_mode=prompt_mode,
        render_dpi=render_dpi,
        send_rendered_page=_bool(env, "SEND_RENDERED_PAGE", True),
        request_timeout=_float(env, "REQUEST_TIMEOUT", 30.0),
        max_upload_bytes=_int(env, "MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        telegram_api_base=(env.get("TELEGRAM_API_BASE") or DEFAULT_TELEGRAM_API_BASE).rstrip("/"),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
    )
