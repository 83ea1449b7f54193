from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Callable, List, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from backends.backend_base import Backend
from rendering.engines.base import BaseRenderEngine


class TileEngine(BaseRenderEngine):
    """
    Fixed-grid tiled rendering:
      - Splits the raster into (tile_w x tile_h) tiles.
      - Renders tiles on a thread pool; each tile writes a disjoint slice.
      - Emits tiles as they are committed and returns the full canvas (H x W).
    """

    def __init__(
        self,
        tile_w: int = 128,
        tile_h: int = 128,
        max_workers: int = 0,      # 0 -> auto
        order: str = "scanline",   # "scanline" | "center-first"
        on_tile: Optional[Callable[[int, int, np.ndarray], None]] = None
    ) -> None:
        super().__init__(on_tile=on_tile)
        self.tile_w = max(1, int(tile_w))
        self.tile_h = max(1, int(tile_h))
        self.max_workers = int(max_workers)
        self.order = order

    def _worker_count(self, n_tiles: int) -> int:
        workers = self.max_workers if self.max_workers > 0 else (os.cpu_count() or 1)
        return max(1, min(workers, n_tiles))

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
        W, H = int(width), int(height)
        canvas = np.zeros((H, W), dtype=np.int32)

        tiles = self._compute_tiles(W, H, self.tile_w, self.tile_h)
        if not tiles:
            return canvas
        if self.order == "center-first":
            tiles = self._order_center_first(tiles, W, H)

        def run(tile: Tuple[int, int, int, int]) -> Tuple[Tuple[int, int, int, int], np.ndarray]:
            return tile, backend.render(fractal, viewport, W, H, budget, region=tile)

        with ThreadPoolExecutor(max_workers=self._worker_count(len(tiles))) as ex:
            # map() yields in submission order; the first failure propagates
            for (x0, y0, w, h), part in ex.map(run, tiles):
                canvas[y0:y0 + h, x0:x0 + w] = part
                self.emit_tile(x0, y0, part)

        return canvas

    # ---- Helpers --------------------------------------------------------

    @staticmethod
    def _compute_tiles(W: int, H: int, tw: int, th: int) -> List[Tuple[int, int, int, int]]:
        tiles: List[Tuple[int, int, int, int]] = []
        for y0 in range(0, H, th):
            h = min(th, H - y0)
            for x0 in range(0, W, tw):
                w = min(tw, W - x0)
                tiles.append((x0, y0, w, h))
        return tiles

    @staticmethod
    def _order_center_first(tiles: List[Tuple[int, int, int, int]], W: int, H: int) -> List[Tuple[int, int, int, int]]:
        cx, cy = (W - 1) * 0.5, (H - 1) * 0.5

        def key(t):
            x0, y0, w, h = t
            tx, ty = x0 + 0.5 * w, y0 + 0.5 * h
            dx, dy = tx - cx, ty - cy
            return dx * dx + dy * dy
        return sorted(tiles, key=key)
