import numpy as np

from coloring.base import ColoringStrategy
from coloring.palettes import get_palette


class GradientColoring(ColoringStrategy):
    """
    Smooth alternative to the reference palette: count / budget indexes a
    continuous palette with linear blending between neighbouring entries.
    Interior points use a fixed color.
    """

    def __init__(self, palette: str = "Classic", interior_color=(0, 20, 20)):
        self.palette_name = palette
        self.palette = get_palette(palette)
        self.interior_color = tuple(interior_color)

    def apply(self, counts: np.ndarray, budget: int) -> np.ndarray:
        counts = np.asarray(counts)
        rgb = np.empty(counts.shape + (3,), dtype=np.uint8)
        if counts.size == 0:
            return rgb

        size = len(self.palette)
        t = np.clip(counts.astype(np.float64) / max(1, int(budget)), 0.0, 1.0)
        idx_f = t * (size - 1)
        idx = np.clip(idx_f.astype(np.int64), 0, size - 1)
        frac = (idx_f - idx)[..., None]
        idx_next = np.clip(idx + 1, 0, size - 1)
        c0 = self.palette[idx].astype(np.float64)
        c1 = self.palette[idx_next].astype(np.float64)
        rgb[...] = np.clip((1.0 - frac) * c0 + frac * c1, 0, 255).astype(np.uint8)
        rgb[counts >= budget] = self.interior_color
        return rgb
