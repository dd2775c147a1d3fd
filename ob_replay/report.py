from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from ob_core.sequencer import SequenceGap
from ob_core.types import Snapshot


COLUMNS = [
    "timestamp",
    "sequence",
    "best_bid",
    "best_bid_size",
    "best_ask",
    "best_ask_size",
    "mid_price",
    "spread",
    "spread_bps",
    "bid_levels",
    "ask_levels",
]


@dataclass
class ReplaySummary:
    n_snapshots: int
    n_crossed: int
    n_one_sided: int
    n_gaps: int
    first_sequence: int
    last_sequence: int
    mean_spread_bps: float
    p50_spread_bps: float
    p90_spread_bps: float


def _safe_float(s) -> float:
    if s is None:
        return float("nan")
    try:
        return float(s)
    except Exception:
        return float("nan")


def top_of_book_row(snap: Snapshot) -> Dict[str, Any]:
    bb = snap.best_bid
    ba = snap.best_ask
    return {
        "timestamp": snap.timestamp,
        "sequence": snap.sequence,
        "best_bid": _safe_float(bb.px) if bb else float("nan"),
        "best_bid_size": _safe_float(bb.sz) if bb else float("nan"),
        "best_ask": _safe_float(ba.px) if ba else float("nan"),
        "best_ask_size": _safe_float(ba.sz) if ba else float("nan"),
        "mid_price": _safe_float(snap.mid_price),
        "spread": _safe_float(snap.spread),
        "spread_bps": _safe_float(snap.spread_bps),
        "bid_levels": len(snap.bids),
        "ask_levels": len(snap.asks),
    }


def rows_to_frame(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=COLUMNS)


def snapshots_to_frame(snapshots: Iterable[Snapshot]) -> pd.DataFrame:
    """One row per snapshot with top-of-book and derived metrics as floats (NaN when absent)."""
    return rows_to_frame(top_of_book_row(s) for s in snapshots)


def summarize(frame: pd.DataFrame, gaps: Sequence[SequenceGap] = ()) -> ReplaySummary:
    if frame.empty:
        nan = float("nan")
        return ReplaySummary(0, 0, 0, len(gaps), 0, 0, nan, nan, nan)

    spread = pd.to_numeric(frame["spread"], errors="coerce")
    bps = pd.to_numeric(frame["spread_bps"], errors="coerce").replace([np.inf, -np.inf], np.nan).dropna()

    if bps.empty:
        mean_bps = p50 = p90 = float("nan")
    else:
        values = bps.to_numpy(dtype=float)
        mean_bps = float(np.mean(values))
        p50 = float(np.percentile(values, 50))
        p90 = float(np.percentile(values, 90))

    return ReplaySummary(
        n_snapshots=int(len(frame)),
        n_crossed=int((spread < 0).sum()),
        n_one_sided=int(frame["mid_price"].isna().sum()),
        n_gaps=len(gaps),
        first_sequence=int(frame["sequence"].iloc[0]),
        last_sequence=int(frame["sequence"].iloc[-1]),
        mean_spread_bps=mean_bps,
        p50_spread_bps=p50,
        p90_spread_bps=p90,
    )


def write_report_csv(path: Path, frame: pd.DataFrame) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
