import numpy as np
from typing import Optional

from fractals.base import Fractal, Viewport, RenderSettings
from backends.backend_base import Backend, Region


class PythonBackend(Backend):
    """
    Reference backend: maps every pixel with Viewport.pixel_to_plane and
    evaluates it with the fractal's scalar iterate(). Slow, but it is the
    literal per-pixel pipeline and needs no compilation.
    """
    name = "PYTHON"

    def __init__(self):
        self.iterate = None

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        spec = fractal.get_backend_spec(settings, self.name)
        self.iterate = spec["kernel_source"]

    def render(self, fractal: Fractal, vp: Viewport, width: int, height: int,
               budget: int, region: Optional[Region] = None) -> np.ndarray:
        iterate = self.iterate or fractal.iterate
        x0, y0, w, h = region or self.full_region(width, height)
        out = np.zeros((max(h, 0), max(w, 0)), dtype=np.int32)
        for j in range(h):
            for i in range(w):
                x, y = vp.pixel_to_plane(x0 + i, y0 + j, width, height)
                out[j, i] = iterate(complex(x, y), budget)
        return out
