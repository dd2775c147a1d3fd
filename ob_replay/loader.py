from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping

from ob_core.types import Checkpoint, Delta, PriceLevel, TickData


class TickDataError(ValueError):
    """Tick data is missing its checkpoint or deltas, or a record is unusable."""


_SIDES = {"bid": "bid", "bids": "bid", "ask": "ask", "asks": "ask"}


def _open_text(path: Path):
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return path.open("r", encoding="utf-8")


def parse_level(raw: Any) -> PriceLevel:
    """Accept `{px, sz, n}`, `{price, size, orderCount}` or `[px, sz(, n)]`.

    Values are kept as delivered; numeric parsing happens when the book is
    initialized so that failures name the offending level.
    """
    if isinstance(raw, Mapping):
        px = raw.get("px", raw.get("price"))
        sz = raw.get("sz", raw.get("size"))
        n = raw.get("n", raw.get("orderCount", raw.get("orders")))
        return PriceLevel(px=px, sz=sz, n=n)
    if isinstance(raw, (list, tuple)) and len(raw) in (2, 3):
        n = raw[2] if len(raw) == 3 else None
        return PriceLevel(px=raw[0], sz=raw[1], n=n)
    raise TickDataError(f"unrecognized price level {raw!r}")


def parse_checkpoint(raw: Mapping[str, Any]) -> Checkpoint:
    instrument = raw.get("coin", raw.get("instrument"))
    if instrument is None:
        raise TickDataError("checkpoint missing coin/instrument")
    if "timestamp" not in raw:
        raise TickDataError("checkpoint missing timestamp")
    return Checkpoint(
        instrument=str(instrument),
        timestamp=raw["timestamp"],
        bids=[parse_level(lvl) for lvl in raw.get("bids") or []],
        asks=[parse_level(lvl) for lvl in raw.get("asks") or []],
    )


def parse_delta(raw: Mapping[str, Any]) -> Delta:
    side = _SIDES.get(str(raw.get("side", "")).strip().lower())
    if side is None:
        raise TickDataError(f"invalid delta side {raw.get('side')!r}")
    try:
        return Delta(
            side=side,
            price=float(raw["price"]),
            size=float(raw["size"]),
            sequence=int(raw["sequence"]),
            timestamp=raw["timestamp"],
        )
    except KeyError as exc:
        raise TickDataError(f"delta missing or invalid field {exc}: {dict(raw)!r}") from exc
    except (TypeError, ValueError) as exc:
        raise TickDataError(f"invalid delta {dict(raw)!r}: {exc}") from exc


def parse_tick_data(raw: Mapping[str, Any]) -> TickData:
    checkpoint = raw.get("checkpoint")
    deltas = raw.get("deltas")
    if not checkpoint or deltas is None:
        msg = raw.get("error") or raw.get("message") or "tick data requires both a checkpoint and a deltas list"
        raise TickDataError(str(msg))
    return TickData(
        checkpoint=parse_checkpoint(checkpoint),
        deltas=[parse_delta(d) for d in deltas],
    )


def load_tick_data(path: Path) -> TickData:
    """Load a `{checkpoint, deltas}` JSON document (gzip if the name ends in .gz)."""
    with _open_text(Path(path)) as f:
        raw = json.load(f)
    if not isinstance(raw, Mapping):
        raise TickDataError(f"{path}: expected a JSON object")
    return parse_tick_data(raw)


def load_checkpoint(path: Path) -> Checkpoint:
    with _open_text(Path(path)) as f:
        raw = json.load(f)
    if not isinstance(raw, Mapping):
        raise TickDataError(f"{path}: expected a JSON object")
    return parse_checkpoint(raw)


def iter_deltas(path: Path) -> Iterator[Delta]:
    """Stream deltas from an NDJSON file, one object per line."""
    with _open_text(Path(path)) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield parse_delta(json.loads(line))


def load_deltas(paths: Iterable[Path]) -> List[Delta]:
    deltas: List[Delta] = []
    for path in paths:
        deltas.extend(iter_deltas(path))
    return deltas
