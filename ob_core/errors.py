from __future__ import annotations

from typing import Any


class LevelParseError(ValueError):
    """A checkpoint level whose price, size or order count cannot be parsed."""

    def __init__(self, side: str, index: int, field: str, value: Any) -> None:
        self.side = side
        self.index = index
        self.field = field
        self.value = value
        expected = "an integer" if field == "n" else "a finite number"
        super().__init__(f"checkpoint {side}[{index}].{field} is not {expected} (got {value!r})")


class BookNotInitializedError(RuntimeError):
    pass
