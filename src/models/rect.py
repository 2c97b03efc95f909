"""
Rectangle model for encoded frames.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple, Union

# Value bits. Only ON rectangles are stored; OFF is the implicit background.
OFF = 0
ON = 1


@dataclass(frozen=True)
class Rectangle:
    """
    An axis-aligned block of cells sharing one value.
    
    Attributes:
        x: Left column of the top-left cell.
        y: Top row of the top-left cell.
        w: Width in cells (>= 1).
        h: Height in cells (>= 1).
        v: Value bit (1 = on). Kept as an int so multi-level encodings fit.
    """
    x: int
    y: int
    w: int
    h: int
    v: int = ON

    def __post_init__(self):
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Rectangle origin must be non-negative, got ({self.x}, {self.y})")
        if self.w < 1 or self.h < 1:
            raise ValueError(f"Rectangle size must be at least 1x1, got {self.w}x{self.h}")

    @property
    def x_end(self) -> int:
        """Exclusive right edge."""
        return self.x + self.w

    @property
    def y_end(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.h

    @property
    def area(self) -> int:
        return self.w * self.h

    def fits_within(self, width: int, height: int) -> bool:
        return self.x_end <= width and self.y_end <= height

    def as_tuple(self) -> Tuple[int, int, int, int, int]:
        """Return as (x, y, w, h, v) tuple."""
        return (self.x, self.y, self.w, self.h, self.v)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h, "v": self.v}

    @classmethod
    def from_any(cls, raw: Union[Sequence[Any], Mapping[str, Any]]) -> "Rectangle":
        """
        Adapter: normalize a tuple `(x, y, w, h[, v])` or a `{x, y, w, h[, v]}`
        record. A missing or null `v` means on.

        Raises:
            ValueError: If the shape is not recognized or a field is not an integer.
        """
        if isinstance(raw, Mapping):
            try:
                fields = [raw["x"], raw["y"], raw["w"], raw["h"]]
            except KeyError as e:
                raise ValueError(f"rectangle record missing field {e.args[0]!r}") from None
            v = raw.get("v")
        elif isinstance(raw, (list, tuple)):
            if len(raw) not in (4, 5):
                raise ValueError(f"rectangle tuple must have 4 or 5 items, got {len(raw)}")
            fields = list(raw[:4])
            v = raw[4] if len(raw) == 5 else None
        else:
            raise ValueError(f"unsupported rectangle representation: {type(raw).__name__}")

        values = []
        for value in fields + [ON if v is None else v]:
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
                or int(value) != value
            ):
                raise ValueError(f"rectangle field is not an integer: {value!r}")
            values.append(int(value))
        return cls(*values)
