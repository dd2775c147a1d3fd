from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .local_orderbook import LocalOrderBook
from .sequencer import SequenceGap, detect_gaps, sort_deltas
from .types import Checkpoint, Delta, Snapshot, TickData


log = logging.getLogger("reconstructor")


@dataclass(frozen=True)
class ReconstructOptions:
    depth: Optional[int] = None  # None -> all levels
    emit_all: bool = True


DEFAULT_OPTIONS = ReconstructOptions()


class OrderBookReconstructor:
    """Rebuild order-book snapshots from a checkpoint plus price-level deltas.

    Pure in-memory transform (no network, no files). Three replay modes share
    the same primitives on `self.book`:
      - reconstruct_all: pre-delta snapshot plus one snapshot per delta
      - iterate: the same sequence produced lazily
      - reconstruct_final: apply everything, render once

    Deltas are always applied in ascending sequence order. One instance holds
    one book; do not drive it from several callers at once.
    """

    def __init__(self, book: Optional[LocalOrderBook] = None):
        self.book = book or LocalOrderBook()

    def initialize(self, checkpoint: Checkpoint) -> None:
        self.book.initialize(checkpoint)
        log.debug(
            "checkpoint loaded instrument=%s bids=%d asks=%d",
            checkpoint.instrument,
            len(self.book.bids),
            len(self.book.asks),
        )

    def apply_delta(self, delta: Delta) -> None:
        self.book.apply_delta(delta)

    def get_snapshot(self, depth: Optional[int] = None) -> Snapshot:
        return self.book.get_snapshot(depth)

    def reconstruct_all(
        self,
        checkpoint: Checkpoint,
        deltas: Sequence[Delta],
        options: ReconstructOptions = DEFAULT_OPTIONS,
    ) -> List[Snapshot]:
        """Replay every delta.

        With `emit_all` this returns `1 + len(deltas)` snapshots; otherwise a
        single-element list holding the final state. For large inputs prefer
        `iterate()`.
        """
        if not options.emit_all:
            return [self.reconstruct_final(checkpoint, deltas, options.depth)]

        self.initialize(checkpoint)
        snapshots = [self.get_snapshot(options.depth)]
        for delta in sort_deltas(deltas):
            self.apply_delta(delta)
            snapshots.append(self.get_snapshot(options.depth))
        log.debug("replayed deltas=%d snapshots=%d", len(deltas), len(snapshots))
        return snapshots

    def iterate(
        self,
        checkpoint: Checkpoint,
        deltas: Sequence[Delta],
        options: ReconstructOptions = DEFAULT_OPTIONS,
    ) -> Iterator[Snapshot]:
        """Lazy variant of `reconstruct_all` (always emits every step).

        The checkpoint is parsed here, so a malformed one fails at the call
        site. Each snapshot is rendered only when requested; stopping early
        leaves the remaining deltas unapplied.
        """
        self.initialize(checkpoint)
        return self._iter_snapshots(sort_deltas(deltas), options.depth)

    def _iter_snapshots(self, ordered: List[Delta], depth: Optional[int]) -> Iterator[Snapshot]:
        yield self.get_snapshot(depth)
        for delta in ordered:
            self.apply_delta(delta)
            yield self.get_snapshot(depth)

    def reconstruct_final(
        self,
        checkpoint: Checkpoint,
        deltas: Sequence[Delta],
        depth: Optional[int] = None,
    ) -> Snapshot:
        self.initialize(checkpoint)
        for delta in sort_deltas(deltas):
            self.apply_delta(delta)
        return self.get_snapshot(depth)

    @staticmethod
    def detect_gaps(deltas: Sequence[Delta]) -> List[SequenceGap]:
        return detect_gaps(deltas)


def reconstruct_order_book(tick_data: TickData, options: ReconstructOptions = DEFAULT_OPTIONS) -> List[Snapshot]:
    """One-shot `reconstruct_all` on a fresh reconstructor."""
    return OrderBookReconstructor().reconstruct_all(tick_data.checkpoint, tick_data.deltas, options)


def reconstruct_final(tick_data: TickData, depth: Optional[int] = None) -> Snapshot:
    return OrderBookReconstructor().reconstruct_final(tick_data.checkpoint, tick_data.deltas, depth)
