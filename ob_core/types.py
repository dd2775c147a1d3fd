from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

Side = Literal["bid", "ask"]
Number = Union[str, int, float]
Timestamp = Union[int, float, str, datetime]


@dataclass(frozen=True)
class PriceLevel:
    """Aggregated resting liquidity at one price (wire form)."""

    px: Number
    sz: Number
    n: Optional[int] = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"px": self.px, "sz": self.sz, "n": self.n}


@dataclass(frozen=True)
class Checkpoint:
    instrument: str
    timestamp: Timestamp
    bids: List[PriceLevel] = field(default_factory=list)
    asks: List[PriceLevel] = field(default_factory=list)


@dataclass(frozen=True)
class Delta:
    side: Side
    price: float
    size: float  # 0 removes the level
    sequence: int
    timestamp: Timestamp


@dataclass(frozen=True)
class TickData:
    checkpoint: Checkpoint
    deltas: List[Delta]


@dataclass(frozen=True)
class Snapshot:
    instrument: str
    timestamp: str
    bids: List[PriceLevel]
    asks: List[PriceLevel]
    mid_price: Optional[str] = None
    spread: Optional[str] = None
    spread_bps: Optional[str] = None
    sequence: int = 0

    @property
    def best_bid(self) -> Optional[PriceLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[PriceLevel]:
        return self.asks[0] if self.asks else None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; absent metrics are omitted rather than emitted as null."""
        out: Dict[str, Any] = {
            "coin": self.instrument,
            "timestamp": self.timestamp,
            "bids": [lvl.to_dict() for lvl in self.bids],
            "asks": [lvl.to_dict() for lvl in self.asks],
        }
        if self.mid_price is not None:
            out["midPrice"] = self.mid_price
        if self.spread is not None:
            out["spread"] = self.spread
        if self.spread_bps is not None:
            out["spreadBps"] = self.spread_bps
        out["sequence"] = self.sequence
        return out
