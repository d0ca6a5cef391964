# 環境變數設定：wiki 查詢、HTTP 與日誌

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_USER_AGENT = "LoreKeeper/0.1 (fantasy book tracker; wiki lore lookup)"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class WikiSettings:
    request_delay_seconds: float = 1.0
    http_timeout_seconds: float = 45.0
    http_connect_timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    event_log_dir: str | None = None
    log_dir: str = "logs"
    log_level: str = "DEBUG"

    @classmethod
    def from_env(cls) -> "WikiSettings":
        event_log_dir = _env_str("LORE_EVENT_LOG_DIR", "")
        return cls(
            request_delay_seconds=_env_float("LORE_REQUEST_DELAY_SECONDS", 1.0),
            http_timeout_seconds=_env_float("LORE_HTTP_TIMEOUT_SECONDS", 45.0),
            http_connect_timeout_seconds=_env_float("LORE_HTTP_CONNECT_TIMEOUT_SECONDS", 10.0),
            user_agent=_env_str("LORE_USER_AGENT", DEFAULT_USER_AGENT),
            event_log_dir=event_log_dir or None,
            log_dir=_env_str("LORE_LOG_DIR", "logs"),
            log_level=_env_str("LORE_LOG_LEVEL", "DEBUG").upper(),
        )
