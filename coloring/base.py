from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]


class ColoringStrategy(ABC):
    """
    Maps escape counts (computed under a given iteration budget) to colors.
    Subclasses implement the vectorized apply(); color_for() is the
    single-pixel view of the same mapping.
    """
    interior_color: RGB = (0, 0, 0)

    @abstractmethod
    def apply(self, counts: np.ndarray, budget: int) -> np.ndarray:
        """(H, W) counts -> (H, W, 3) uint8 RGB."""
        ...

    def color_for(self, count: int, budget: int) -> RGB:
        rgb = self.apply(np.array([[count]], dtype=np.int64), budget)[0, 0]
        return int(rgb[0]), int(rgb[1]), int(rgb[2])


def to_channel(values: np.ndarray) -> np.ndarray:
    """Float channel -> uint8: NaN becomes 0, everything clamps to [0, 255]."""
    values = np.nan_to_num(values, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(values, 0.0, 255.0).astype(np.uint8)
