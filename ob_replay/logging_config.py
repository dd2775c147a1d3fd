import logging
from pathlib import Path
from datetime import datetime
from zoneinfo import ZoneInfo
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _install_handlers(log_path: Path, level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(_FORMAT)
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(fmt)
    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    root.addHandler(fh)
    root.addHandler(sh)


def setup_logging(
    level: str = "INFO",
    component: str = "replay",
    subdir: str = "default",
    base_dir: str | Path = "logs",
) -> Path:
    """
    Configure logging:
      - Console (stderr)
      - Daily log file in <base_dir>/<component>/<subdir>/YYYY-MM-DD.log (Berlin date)

    Returns:
      Path to the "current" daily log file.
    """
    log_dir = Path(base_dir) / component / subdir
    log_dir.mkdir(parents=True, exist_ok=True)
    date_str = datetime.now(ZoneInfo("Europe/Berlin")).strftime("%Y-%m-%d")
    log_path = log_dir / f"{date_str}.log"
    _install_handlers(log_path, level)
    return log_path


def setup_run_logging(
    *,
    level: str = "INFO",
    instrument: str,
    run_id: str,
    base_dir: str | Path = "out/logs",
    mode: Optional[str] = None,
) -> Path:
    """Run-scoped logging for a single replay job.

    Layout:
      <base_dir>/replay/<mode?>/<instrument>/<run_id>/run.log
    """
    parts = ["replay"]
    if mode:
        parts.append(mode)
    parts.extend([instrument, run_id])
    log_dir = Path(base_dir).joinpath(*parts)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "run.log"
    _install_handlers(log_path, level)
    return log_path
