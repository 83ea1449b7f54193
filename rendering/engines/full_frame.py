from __future__ import annotations

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from backends.backend_base import Backend
from rendering.engines.base import BaseRenderEngine


class FullFrameEngine(BaseRenderEngine):
    """
    Full-frame rendering strategy:
      - Delegates a single blocking render of the whole raster to the backend.
      - No tiles are emitted (on_tile is unused here).
    """

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
        if width == 0 or height == 0:
            return np.zeros((height, width), dtype=np.int32)
        canvas = backend.render(fractal, viewport, width, height, budget)
        if canvas.dtype != np.int32:
            canvas = canvas.astype(np.int32, copy=False)
        return canvas
