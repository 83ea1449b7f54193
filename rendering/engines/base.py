from __future__ import annotations

from typing import Optional, Callable
import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from backends.backend_base import Backend


class BaseRenderEngine:
    """
    Base class for render engines (full-frame, tiled).

    Responsibilities:
      - Decide *how* to decompose the raster into pixel regions,
      - Emit partial results via on_tile (if applicable),
      - Delegate the escape-count computation to a backend.

    Engines never stop early: every call returns a complete (H, W) int32
    canvas of escape counts.
    """

    def __init__(self, on_tile: Optional[Callable[[int, int, np.ndarray], None]] = None) -> None:
        self.on_tile: Optional[Callable[[int, int, np.ndarray], None]] = on_tile

    def emit_tile(self, x0: int, y0: int, tile_counts: np.ndarray) -> None:
        cb = self.on_tile
        if callable(cb):
            cb(int(x0), int(y0), tile_counts)

    def render(
        self,
        fractal: Fractal,
        backend: Backend,
        settings: RenderSettings,
        viewport: Viewport,
        width: int,
        height: int,
        budget: int,
    ) -> np.ndarray:
        raise NotImplementedError("BaseRenderEngine.render() must be implemented by subclasses.")
