import numpy as np
from typing import Optional

from fractals.base import Fractal, Viewport, RenderSettings
from backends.backend_base import Backend, Region


class CpuBackend(Backend):
    """
    numba-compiled kernels. Full-frame calls use the prange kernel; region
    calls (from the tile engine's thread pool) use the serial nogil kernel so
    numba's own thread pool is never entered from several threads at once.
    """
    name = "CPU"

    def __init__(self):
        self.kernel_func = None
        self.tile_kernel_func = None
        self.precision = None

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        spec = fractal.get_backend_spec(settings, self.name)
        self.kernel_func = spec["kernel_source"]
        self.tile_kernel_func = spec["tile_kernel_source"]
        self.precision = spec["precision"]

    def render(self, fractal: Fractal, vp: Viewport, width: int, height: int,
               budget: int, region: Optional[Region] = None) -> np.ndarray:
        if self.kernel_func is None:
            raise RuntimeError("CpuBackend.render() called before compile()")
        kernel = self.kernel_func if region is None else self.tile_kernel_func
        x0, y0, w, h = region or self.full_region(width, height)
        if w <= 0 or h <= 0:
            return np.zeros((max(h, 0), max(w, 0)), dtype=np.int32)

        cast = self.precision.type
        return kernel(cast(vp.min_x), cast(vp.max_x),
                      cast(vp.min_y), cast(vp.max_y),
                      int(width), int(height),
                      int(x0), int(y0), int(w), int(h),
                      int(budget))
