from __future__ import annotations

import os
from typing import Optional


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


# Unset depth means "all levels".
REPLAY_DEPTH = _env_int("REPLAY_DEPTH", None)
REPLAY_EMIT_ALL = _env_bool("REPLAY_EMIT_ALL", True)
REPLAY_LOG_LEVEL = _env_str("REPLAY_LOG_LEVEL", "INFO")
REPLAY_LOG_DIR = _env_str("REPLAY_LOG_DIR", "logs")
REPLAY_OUT_DIR = _env_str("REPLAY_OUT_DIR", "out/replay")
