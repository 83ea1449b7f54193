from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from fractals.base import Viewport


@dataclass(frozen=True)
class RenderResult:
    """
    One finished frame: the RGB raster, the escape counts behind it, and the
    iteration budget and wall-clock duration used to produce it.
    Arrays are indexed [py, px] and are read-only.
    """
    rgb: np.ndarray          # (H, W, 3) uint8
    counts: np.ndarray       # (H, W) int32
    budget: int
    duration: float          # seconds
    viewport: Viewport

    def __post_init__(self):
        self.rgb.setflags(write=False)
        self.counts.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.rgb.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgb.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.rgb.size == 0

    def pixel(self, px: int, py: int) -> Tuple[int, int, int]:
        r, g, b = self.rgb[py, px]
        return int(r), int(g), int(b)

    def count_at(self, px: int, py: int) -> int:
        return int(self.counts[py, px])
