from dataclasses import dataclass
from typing import Dict, Any, Optional

import numpy as np

from fractals.base import Fractal, RenderSettings
from kernel_sources.cpu.escape_time import (escape_counts_cpu_f64,
                                           escape_counts_tile_f64)
from utils.errors import InvalidParameter

ESCAPE_RADIUS_SQ = 4.0


@dataclass
class MandelbrotFractal(Fractal):
    name: str = "mandelbrot"

    def iterate(self, c: complex, budget: int) -> int:
        """
        Escape-time count for c under z <- z^2 + c, starting from z = 0.

        Stops as soon as |z|^2 exceeds 4 or after `budget` steps. A result
        equal to `budget` means the orbit stayed bounded (interior point).
        """
        cr = float(c.real)
        ci = float(c.imag)
        zr = 0.0
        zi = 0.0
        n = 0
        while n < budget and zr*zr + zi*zi <= ESCAPE_RADIUS_SQ:
            tmp = zr*zr - zi*zi + cr
            zi = 2.0*zr*zi + ci
            zr = tmp
            n += 1
        return n

    def get_backend_spec(self, settings: RenderSettings,
                         backend_name: str) -> Optional[Dict[str, Any]]:
        cast = np.dtype(settings.precision)
        if cast != np.float64:
            raise InvalidParameter(
                f"{self.name} only supports float64 coordinates, got {cast}")
        name = backend_name.lower()
        tile_src = None
        if name == "cpu":
            src = escape_counts_cpu_f64
            tile_src = escape_counts_tile_f64
        elif name == "python":
            src = self.iterate
        else:
            raise NotImplementedError(f"No {self.name} kernel for backend {backend_name}")
        return {
            "kernel_source": src,
            "tile_kernel_source": tile_src or src,
            "kernel_name": f"{self.name}_escape_counts",
            "precision": cast,
        }
