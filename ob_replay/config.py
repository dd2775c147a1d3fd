from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ob_core.reconstructor import ReconstructOptions
from ob_replay import settings


def load_config(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"config {path} must be a mapping (got {type(cfg).__name__})")
    return cfg


def _coerce_depth(value: Any) -> Optional[int]:
    if value is None:
        return None
    depth = int(value)
    if depth < 0:
        raise ValueError(f"depth must be non-negative (got {value!r})")
    return depth


@dataclass(frozen=True)
class ReplayConfig:
    depth: Optional[int] = None
    emit_all: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"
    out_dir: str = "out/replay"

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None = None) -> "ReplayConfig":
        """Build from a YAML mapping; missing keys fall back to env-driven defaults."""
        cfg = cfg or {}
        return cls(
            depth=_coerce_depth(cfg.get("depth", settings.REPLAY_DEPTH)),
            emit_all=bool(cfg.get("emit_all", settings.REPLAY_EMIT_ALL)),
            log_level=str(cfg.get("log_level", settings.REPLAY_LOG_LEVEL)),
            log_dir=str(cfg.get("log_dir", settings.REPLAY_LOG_DIR)),
            out_dir=str(cfg.get("out_dir", settings.REPLAY_OUT_DIR)),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "ReplayConfig":
        return cls.from_mapping(load_config(path))

    def options(self) -> ReconstructOptions:
        return ReconstructOptions(depth=self.depth, emit_all=self.emit_all)
