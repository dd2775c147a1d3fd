from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import islice
from typing import Iterable, Iterator, Optional

import numpy as np
from sortedcontainers import SortedDict

from .errors import BookNotInitializedError, LevelParseError
from .types import Checkpoint, Delta, Number, PriceLevel, Snapshot, Timestamp


def _format_number(value: float) -> str:
    """Positional text without a trailing `.0`: `100`, `100.5`, `0.00001`."""
    return np.format_float_positional(value, trim="-")


def _parse_finite(side: str, index: int, field: str, raw) -> float:
    if isinstance(raw, bool):
        raise LevelParseError(side, index, field, raw)
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise LevelParseError(side, index, field, raw) from exc
    if not math.isfinite(value):
        raise LevelParseError(side, index, field, raw)
    return value


def _parse_orders(side: str, index: int, raw) -> int:
    if raw is None:
        return 1
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise LevelParseError(side, index, "n", raw) from exc
    if not value.is_integer():
        raise LevelParseError(side, index, "n", raw)
    return int(value)


def canonical_timestamp(value: Timestamp) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. `2024-01-01T00:00:00.000Z`.

    Numbers are epoch milliseconds; naive datetimes are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class _Level:
    price: float
    size: float
    orders: int
    px: Number
    sz: Number

    def to_wire(self) -> PriceLevel:
        return PriceLevel(px=self.px, sz=self.sz, n=self.orders)


def _load_side(side: str, levels: Iterable[PriceLevel]) -> SortedDict:
    book = SortedDict()
    for i, level in enumerate(levels):
        price = _parse_finite(side, i, "px", level.px)
        size = _parse_finite(side, i, "sz", level.sz)
        orders = _parse_orders(side, i, level.n)
        if size == 0:
            continue
        # rendered back exactly as supplied, text or number
        book[price] = _Level(price=price, size=size, orders=orders, px=level.px, sz=level.sz)
    return book


class LocalOrderBook:
    """In-memory L2 book for a single instrument, keyed by float price.

    Not safe to drive from several callers at once; use one instance per
    replay task.
    """

    def __init__(self) -> None:
        self.bids: SortedDict = SortedDict()
        self.asks: SortedDict = SortedDict()
        self.instrument: str = ""
        self.last_timestamp: str = ""
        self.last_sequence: int = 0
        self.initialized: bool = False
        # levels inserted by deltas follow the checkpoint: numbers in, numbers out
        self.numeric_levels: bool = False

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise BookNotInitializedError("order book is not initialized; call initialize() with a checkpoint first")

    def initialize(self, checkpoint: Checkpoint) -> None:
        """Reset the book to the checkpoint state.

        All-or-nothing: if any level fails to parse, both sides are left empty
        and the book must be initialized again before use.
        """
        self.initialized = False
        self.bids.clear()
        self.asks.clear()

        bids = _load_side("bids", checkpoint.bids)
        asks = _load_side("asks", checkpoint.asks)

        self.bids = bids
        self.asks = asks
        levels = list(checkpoint.bids) + list(checkpoint.asks)
        self.numeric_levels = bool(levels) and not any(isinstance(lvl.px, str) for lvl in levels)
        self.instrument = checkpoint.instrument
        ts = checkpoint.timestamp
        self.last_timestamp = ts if isinstance(ts, str) else canonical_timestamp(ts)
        # checkpoints carry no sequence number
        self.last_sequence = 0
        self.initialized = True

    def apply_delta(self, delta: Delta) -> None:
        """Upsert or remove one price level.

        Deltas carry no order count, so upserted levels report `n=1`. That
        figure is an approximation and should not be read as real order data.
        """
        self._require_initialized()
        side = self.bids if delta.side == "bid" else self.asks
        price = float(delta.price)
        size = float(delta.size)
        sequence = int(delta.sequence)
        # resolve everything that can fail before touching the book
        timestamp = canonical_timestamp(delta.timestamp)

        if size == 0:
            side.pop(price, None)
        elif self.numeric_levels:
            side[price] = _Level(price=price, size=size, orders=1, px=price, sz=size)
        else:
            side[price] = _Level(
                price=price,
                size=size,
                orders=1,
                px=_format_number(price),
                sz=_format_number(size),
            )

        self.last_timestamp = timestamp
        self.last_sequence = sequence

    def _iter_bids(self) -> Iterator[_Level]:
        return reversed(self.bids.values())

    def _iter_asks(self) -> Iterator[_Level]:
        return iter(self.asks.values())

    def best_bid(self) -> Optional[float]:
        return self.bids.peekitem(-1)[0] if self.bids else None

    def best_ask(self) -> Optional[float]:
        return self.asks.peekitem(0)[0] if self.asks else None

    def get_snapshot(self, depth: Optional[int] = None) -> Snapshot:
        """Render the book: bids best-first (descending), asks best-first (ascending).

        `depth` truncates each side; metrics always use the full book. `None`
        means every level. Unlike the upstream client, where a falsy depth also
        meant "all", `depth=0` here yields empty sides.
        """
        self._require_initialized()
        if depth is not None and depth < 0:
            raise ValueError(f"depth must be non-negative (got {depth!r})")

        bids = [lvl.to_wire() for lvl in islice(self._iter_bids(), depth)]
        asks = [lvl.to_wire() for lvl in islice(self._iter_asks(), depth)]

        best_bid = self.best_bid()
        best_ask = self.best_ask()
        mid_price = spread = spread_bps = None
        if best_bid is not None and best_ask is not None:
            mid = (best_bid + best_ask) / 2
            diff = best_ask - best_bid  # negative when the book is crossed
            mid_price = _format_number(mid)
            spread = _format_number(diff)
            if mid != 0:
                spread_bps = f"{diff / mid * 10000:.2f}"

        return Snapshot(
            instrument=self.instrument,
            timestamp=self.last_timestamp,
            bids=bids,
            asks=asks,
            mid_price=mid_price,
            spread=spread,
            spread_bps=spread_bps,
            sequence=self.last_sequence,
        )
