from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Iterable

from ob_core.types import Snapshot


def _open_text_for_write(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".gz":
        return gzip.open(path, "wt", encoding="utf-8")
    return path.open("w", encoding="utf-8")


def write_snapshots_ndjson(path: Path, snapshots: Iterable[Snapshot]) -> int:
    """Stream snapshots as NDJSON in wire form. Returns the number of rows written.

    Consumes `snapshots` lazily, so a generator from `iterate()` is never
    materialized in memory.
    """
    count = 0
    with _open_text_for_write(Path(path)) as fh:
        for snap in snapshots:
            fh.write(json.dumps(snap.to_dict(), ensure_ascii=False) + "\n")
            count += 1
    return count
