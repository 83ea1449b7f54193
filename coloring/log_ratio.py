import numpy as np

from coloring.base import ColoringStrategy, to_channel

RED_LEVEL = 100


class LogRatioColoring(ColoringStrategy):
    """
    The viewer's reference palette.

    With n = count + 1 and m = budget + 1, escaped points get
        red   = 100
        green = 255 * 10^n / 10^m
        blue  = 255 * log_100(n) / log_100(m)
    and interior points (count == budget) are dark teal (0, 20, 20).

    The green ratio exponentiates the raw counts, so for budgets beyond a
    few hundred both powers overflow to inf; the resulting NaN is mapped to 0
    and every channel is clamped to [0, 255].
    """
    interior_color = (0, 20, 20)

    def apply(self, counts: np.ndarray, budget: int) -> np.ndarray:
        counts = np.asarray(counts)
        rgb = np.empty(counts.shape + (3,), dtype=np.uint8)
        if counts.size == 0:
            return rgb

        n = counts.astype(np.float64) + 1.0
        m = np.float64(budget) + 1.0
        log_base = np.log(np.float64(100.0))

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            scale = np.log(n) / log_base
            max_scale = np.log(m) / log_base
            scale2 = np.power(np.float64(10.0), n)
            max_scale2 = np.power(np.float64(10.0), m)
            ratio = scale / max_scale
            ratio2 = scale2 / max_scale2
            blue = to_channel(255.0 * ratio)
            green = to_channel(255.0 * ratio2)

        rgb[..., 0] = RED_LEVEL
        rgb[..., 1] = green
        rgb[..., 2] = blue
        rgb[counts >= budget] = self.interior_color
        return rgb
