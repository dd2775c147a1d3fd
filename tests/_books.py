# tests/_books.py

from ob_core.types import Checkpoint, Delta, PriceLevel


def make_checkpoint(bids=(), asks=(), instrument: str = "BTC", timestamp: str = "2024-01-01T00:00:00.000Z") -> Checkpoint:
    # levels are (px, sz) or (px, sz, n)
    return Checkpoint(
        instrument=instrument,
        timestamp=timestamp,
        bids=[PriceLevel(*lvl) for lvl in bids],
        asks=[PriceLevel(*lvl) for lvl in asks],
    )


def make_delta(side: str, price: float, size: float, sequence: int, timestamp: int = 1_704_067_200_000) -> Delta:
    return Delta(side=side, price=price, size=size, sequence=sequence, timestamp=timestamp)


def prices(levels) -> list:
    return [float(lvl.px) for lvl in levels]
