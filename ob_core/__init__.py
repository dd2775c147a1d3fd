"""Order-book state reconstruction from checkpoints and price-level deltas."""

from .errors import BookNotInitializedError, LevelParseError
from .local_orderbook import LocalOrderBook
from .reconstructor import (
    OrderBookReconstructor,
    ReconstructOptions,
    reconstruct_final,
    reconstruct_order_book,
)
from .sequencer import SequenceGap, detect_gaps, sort_deltas
from .types import Checkpoint, Delta, PriceLevel, Snapshot, TickData

__all__ = [
    "BookNotInitializedError",
    "Checkpoint",
    "Delta",
    "LevelParseError",
    "LocalOrderBook",
    "OrderBookReconstructor",
    "PriceLevel",
    "ReconstructOptions",
    "SequenceGap",
    "Snapshot",
    "TickData",
    "detect_gaps",
    "reconstruct_final",
    "reconstruct_order_book",
    "sort_deltas",
]
