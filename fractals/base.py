from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from utils.enums import BackendType, EngineMode
from utils.errors import InvalidParameter


def _require_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameter(f"{name} must be finite, got {value!r}")
    return value


@dataclass
class Viewport:
    """
    The visible rectangle of the complex plane.

    Pixel (0, 0) maps to (min_x, min_y) and pixel (width, height) maps to
    (max_x, max_y); the y axis grows "down" in both pixel and plane space.
    The rectangle is only ever replaced through pan() and zoom(), both of
    which keep min_x < max_x and min_y < max_y.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def __post_init__(self):
        self._check_bounds(self.min_x, self.max_x, self.min_y, self.max_y)
        self.min_x = float(self.min_x)
        self.max_x = float(self.max_x)
        self.min_y = float(self.min_y)
        self.max_y = float(self.max_y)

    @classmethod
    def default(cls) -> "Viewport":
        return cls(min_x=-2.5, max_x=1.0, min_y=-1.5, max_y=1.5)

    @staticmethod
    def _check_bounds(min_x, max_x, min_y, max_y) -> None:
        for name, v in (("min_x", min_x), ("max_x", max_x),
                        ("min_y", min_y), ("max_y", max_y)):
            _require_finite(name, v)
        if not min_x < max_x:
            raise InvalidParameter(f"min_x ({min_x}) must be < max_x ({max_x})")
        if not min_y < max_y:
            raise InvalidParameter(f"min_y ({min_y}) must be < max_y ({max_y})")

    # ---- Queries --------------------------------------------------------

    @property
    def span(self) -> Tuple[float, float]:
        return self.max_x - self.min_x, self.max_y - self.min_y

    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0

    def pixel_to_plane(self, px, py, width, height) -> Tuple[float, float]:
        """
        Linear interpolation from raster coordinates to the plane.
        Out-of-range pixels extrapolate; no bounds check is made.
        """
        x = self.min_x + (px / width) * (self.max_x - self.min_x)
        y = self.min_y + (py / height) * (self.max_y - self.min_y)
        return x, y

    def copy(self) -> "Viewport":
        return Viewport(self.min_x, self.max_x, self.min_y, self.max_y)

    # ---- Mutators -------------------------------------------------------

    def zoom(self, anchor_px_norm: float, anchor_py_norm: float, factor: float) -> None:
        """
        Rescale the rectangle by 1/factor, keeping the plane point under the
        normalized anchor (u, v) fixed. factor > 1 zooms in.
        """
        u = _require_finite("anchor_px_norm", anchor_px_norm)
        v = _require_finite("anchor_py_norm", anchor_py_norm)
        factor = _require_finite("factor", factor)
        if factor <= 0.0:
            raise InvalidParameter(f"zoom factor must be > 0, got {factor}")

        anchor_x = self.min_x + u * (self.max_x - self.min_x)
        anchor_y = self.min_y + v * (self.max_y - self.min_y)

        new_w = (self.max_x - self.min_x) / factor
        new_h = (self.max_y - self.min_y) / factor

        min_x = anchor_x - u * new_w
        max_x = min_x + new_w
        min_y = anchor_y - v * new_h
        max_y = min_y + new_h

        # Rejects spans that collapsed or overflowed in floating point
        self._check_bounds(min_x, max_x, min_y, max_y)
        self.min_x, self.max_x, self.min_y, self.max_y = min_x, max_x, min_y, max_y

    def pan(self, dx: float, dy: float) -> None:
        """Translate the rectangle by (dx, dy) plane units."""
        dx = _require_finite("dx", dx)
        dy = _require_finite("dy", dy)
        min_x, max_x = self.min_x + dx, self.max_x + dx
        min_y, max_y = self.min_y + dy, self.max_y + dy
        self._check_bounds(min_x, max_x, min_y, max_y)
        self.min_x, self.max_x, self.min_y, self.max_y = min_x, max_x, min_y, max_y


@dataclass
class RenderSettings:
    """
    Holds the rendering settings for a fractal.
    Precision specifies the floating-point type used for plane coordinates.
    Backend and engine_mode pick the execution strategy; tile_w/tile_h and
    max_workers only matter for the tiled engine (0 workers -> auto).
    """
    precision: np.dtype = np.float64
    backend: BackendType = BackendType.AUTO
    engine_mode: EngineMode = EngineMode.FULL_FRAME
    tile_w: int = 128
    tile_h: int = 128
    max_workers: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)


class Fractal(ABC):
    """
    An abstract base class for escape-time fractals.
    """
    name: str

    @abstractmethod
    def iterate(self, c: complex, budget: int) -> int: ...

    @abstractmethod
    def get_backend_spec(self, settings: RenderSettings,
                         backend_name: str) -> Optional[Dict[str, Any]]: ...
