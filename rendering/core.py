from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from backends.backend_base import Backend
from backends.backend_manager import select_backend
from coloring.base import ColoringStrategy
from coloring.log_ratio import LogRatioColoring
from fractals.base import Fractal, Viewport, RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from rendering.engines.base import BaseRenderEngine
from rendering.engines.full_frame import FullFrameEngine
from rendering.engines.tile import TileEngine
from rendering.result import RenderResult
from utils.enums import EngineMode
from utils.errors import InvalidParameter

logger = logging.getLogger(__name__)


def make_engine(settings: RenderSettings) -> BaseRenderEngine:
    if settings.engine_mode == EngineMode.FULL_FRAME:
        return FullFrameEngine()
    if settings.engine_mode == EngineMode.TILED:
        return TileEngine(tile_w=settings.tile_w, tile_h=settings.tile_h,
                          max_workers=settings.max_workers)
    raise InvalidParameter(f"Unknown engine mode: {settings.engine_mode!r}")


class Renderer:

    """
    Facade that binds together:
      - the fractal + render settings,
      - the render engine (how the raster is partitioned),
      - the backend (how escape counts are computed),
      - the coloring strategy.

    render() is a pure function of its arguments: it never touches the
    caller's viewport or budget state.
    """

    def __init__(
        self,
        fractal: Optional[Fractal] = None,
        settings: Optional[RenderSettings] = None,
        *,
        engine: Optional[BaseRenderEngine] = None,
        backend: Optional[Backend] = None,
        coloring: Optional[ColoringStrategy] = None,
    ):
        self.fractal = fractal or MandelbrotFractal()
        self.settings = settings or RenderSettings()
        self.engine = engine or make_engine(self.settings)
        self.backend = backend or select_backend(self.settings.backend)
        self.coloring = coloring or LogRatioColoring()

        # Precompile
        self.backend.compile(self.fractal, self.settings)

    # ----------------------------
    # Mutators / helpers
    # ----------------------------

    def set_engine(self, engine: BaseRenderEngine) -> None:
        """Swap rendering strategy."""
        self.engine = engine

    def set_backend(self, backend: Backend) -> None:
        backend.compile(self.fractal, self.settings)
        self.backend.close()
        self.backend = backend

    def set_coloring(self, coloring: ColoringStrategy) -> None:
        self.coloring = coloring

    def close(self) -> None:
        self.backend.close()

    # ----------------------------
    # Render entry points
    # ----------------------------

    def compute_counts(self, viewport: Viewport, width: int, height: int,
                       budget: int) -> np.ndarray:
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise InvalidParameter(f"Raster size must be >= 0, got {width}x{height}")
        if int(budget) < 1:
            raise InvalidParameter(f"Iteration budget must be >= 1, got {budget}")
        return self.engine.render(self.fractal, self.backend, self.settings,
                                  viewport, width, height, int(budget))

    def render(self, viewport: Viewport, width: int, height: int,
               budget: int) -> RenderResult:
        """
        Escape counts and colors for every pixel of a width x height raster.
        Zero-sized rasters give an empty result rather than an error.
        """
        snapshot = viewport.copy()
        start = time.perf_counter()
        counts = self.compute_counts(snapshot, width, height, budget)
        rgb = self.coloring.apply(counts, int(budget))
        duration = time.perf_counter() - start

        logger.debug("Rendered %dx%d at budget %d in %.3fs",
                     int(width), int(height), int(budget), duration)
        return RenderResult(rgb=rgb, counts=counts, budget=int(budget),
                            duration=duration, viewport=snapshot)
