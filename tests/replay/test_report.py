from __future__ import annotations

import math

import pandas as pd
import pytest

from ob_core.reconstructor import OrderBookReconstructor
from ob_core.sequencer import SequenceGap
from ob_replay.report import snapshots_to_frame, summarize, write_report_csv
from tests._books import make_checkpoint, make_delta


def _frame() -> pd.DataFrame:
    checkpoint = make_checkpoint(bids=[("100", "2", 1)], asks=[("101", "3", 1)])
    deltas = [
        make_delta("bid", 102, 1, 1),  # crosses the book
        make_delta("bid", 102, 0, 2),
        make_delta("ask", 101, 0, 3),  # ask side now empty
    ]
    return snapshots_to_frame(OrderBookReconstructor().iterate(checkpoint, deltas))


def test_frame_has_one_row_per_snapshot():
    frame = _frame()
    assert len(frame) == 4
    assert list(frame["sequence"]) == [0, 1, 2, 3]
    assert frame.loc[0, "best_bid"] == 100.0
    assert frame.loc[0, "best_ask_size"] == 3.0
    assert frame.loc[1, "spread"] == -1.0
    assert math.isnan(frame.loc[3, "best_ask"])
    assert frame.loc[3, "ask_levels"] == 0


def test_summarize_counts_crossed_and_one_sided():
    summary = summarize(_frame(), [SequenceGap(5, 7)])
    assert summary.n_snapshots == 4
    assert summary.n_crossed == 1
    assert summary.n_one_sided == 1
    assert summary.n_gaps == 1
    assert summary.first_sequence == 0
    assert summary.last_sequence == 3
    # bps values: 99.50, -98.52, 99.50
    assert summary.p50_spread_bps == pytest.approx(99.50)
    assert summary.mean_spread_bps == pytest.approx((99.50 - 98.52 + 99.50) / 3)


def test_summarize_empty_frame():
    summary = summarize(snapshots_to_frame([]))
    assert summary.n_snapshots == 0
    assert math.isnan(summary.mean_spread_bps)


def test_write_report_csv(tmp_path):
    path = tmp_path / "reports" / "tob.csv"
    write_report_csv(path, _frame())
    loaded = pd.read_csv(path)
    assert list(loaded["sequence"]) == [0, 1, 2, 3]
