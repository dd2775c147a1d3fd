from __future__ import annotations

from typing import Iterable, List, NamedTuple

from .types import Delta


class SequenceGap(NamedTuple):
    expected: int
    actual: int


def sort_deltas(deltas: Iterable[Delta]) -> List[Delta]:
    """Ascending by sequence. Stable: deltas sharing a sequence keep input order."""
    return sorted(deltas, key=lambda d: int(d.sequence))


def detect_gaps(deltas: Iterable[Delta]) -> List[SequenceGap]:
    """Report discontinuities between consecutive sequence numbers.

    Diagnostic only; replay applies deltas regardless. Duplicate sequence
    numbers show up as `(prev + 1, prev)`.
    """
    ordered = sort_deltas(deltas)
    gaps: List[SequenceGap] = []
    for prev, cur in zip(ordered, ordered[1:]):
        expected = int(prev.sequence) + 1
        actual = int(cur.sequence)
        if actual != expected:
            gaps.append(SequenceGap(expected, actual))
    return gaps
