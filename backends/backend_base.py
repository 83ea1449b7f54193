from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings

# (x0, y0, w, h) in raster pixels
Region = Tuple[int, int, int, int]


class Backend(ABC):
    """
    An abstract base class for escape-count backends.

    A backend turns a pixel region of a width x height raster into an int32
    array of escape counts. Regions always use the full-raster pixel mapping,
    so how the raster is partitioned never changes the result.
    """
    name: str

    @abstractmethod
    def compile(self, fractal: Fractal, settings: RenderSettings) -> None: ...

    @abstractmethod
    def render(self, fractal: Fractal, vp: Viewport, width: int, height: int,
               budget: int, region: Optional[Region] = None) -> np.ndarray: ...

    def close(self) -> None:
        pass

    @staticmethod
    def full_region(width: int, height: int) -> Region:
        return 0, 0, int(width), int(height)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
