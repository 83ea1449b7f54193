from typing import Optional, Tuple

from backends.backend_manager import select_backend
from coloring.gradient import GradientColoring
from coloring.log_ratio import LogRatioColoring
from fractals.base import Viewport
from rendering.core import make_engine
from rendering.service import RenderService
from utils.enums import BackendType, ColoringMode, EngineMode, PendingInputPolicy
from utils.errors import InvalidParameter


class RenderConfigBuilder:
    """
    Builder for configuring render settings.
    """
    def __init__(self, service: RenderService):
        self.service = service
        self._resolution: Optional[str] = None
        self._size: Optional[Tuple[int, int]] = None
        self._backend: Optional[BackendType] = None
        self._engine_mode: Optional[EngineMode] = None
        self._tile_w: Optional[int] = None
        self._tile_h: Optional[int] = None
        self._coloring: Optional[ColoringMode] = None
        self._palette: str = "Classic"
        self._target_duration: Optional[float] = None
        self._cap: Optional[int] = None
        self._input_policy: Optional[PendingInputPolicy] = None

    def resolution(self, preset: str) -> 'RenderConfigBuilder':
        self._resolution = preset
        return self

    def size(self, width: int, height: int) -> 'RenderConfigBuilder':
        self._size = (int(width), int(height))
        return self

    def backend(self, backend: BackendType) -> 'RenderConfigBuilder':
        self._backend = backend
        return self

    def engine_mode(self, mode: EngineMode, tile_w: int = None, tile_h: int = None) -> 'RenderConfigBuilder':
        self._engine_mode = mode
        self._tile_w = tile_w
        self._tile_h = tile_h
        return self

    def coloring(self, mode: ColoringMode, palette: str = "Classic") -> 'RenderConfigBuilder':
        self._coloring = mode
        self._palette = palette
        return self

    def target_duration(self, seconds: float) -> 'RenderConfigBuilder':
        self._target_duration = float(seconds)
        return self

    def iteration_cap(self, cap: int) -> 'RenderConfigBuilder':
        self._cap = int(cap)
        return self

    def input_policy(self, policy: PendingInputPolicy) -> 'RenderConfigBuilder':
        self._input_policy = policy
        return self

    def apply(self) -> RenderService:
        # Apply settings to the service
        service = self.service
        renderer = service.renderer
        if self._resolution:
            service.set_image_size(*self._compute_size(self._resolution))
        if self._size:
            service.set_image_size(*self._size)
        if self._backend:
            renderer.settings.backend = self._backend
            renderer.set_backend(select_backend(self._backend))
        if self._engine_mode:
            renderer.settings.engine_mode = self._engine_mode
            if self._tile_w:
                renderer.settings.tile_w = int(self._tile_w)
            if self._tile_h:
                renderer.settings.tile_h = int(self._tile_h)
            renderer.set_engine(make_engine(renderer.settings))
        if self._coloring == ColoringMode.LOG_RATIO:
            renderer.set_coloring(LogRatioColoring())
        elif self._coloring == ColoringMode.GRADIENT:
            renderer.set_coloring(GradientColoring(self._palette))
        if self._target_duration is not None:
            self._step_to(self._target_duration,
                          lambda: service.controller.target_duration,
                          service.increase_target, service.decrease_target)
        if self._cap is not None:
            self._step_to(self._cap,
                          lambda: service.controller.cap,
                          service.increase_cap, service.decrease_cap)
        if self._input_policy:
            service.set_input_policy(self._input_policy)
        service.request_render()
        return service

    @staticmethod
    def _step_to(goal, current, up, down) -> None:
        # Target and cap only move in user-sized steps; walk to the nearest
        # reachable value.
        while current() < goal:
            before = current()
            up()
            if current() > goal:
                down()
                break
            if current() == before:
                break
        while current() > goal:
            before = current()
            down()
            if current() == before:
                break

    @staticmethod
    def _compute_size(preset: str) -> tuple[int, int]:
        mapping = {
            "2160p": 3840,
            "1440p": 2560,
            "1080p": 1920,
            "720p": 1280,
            "480p": 854,
            "360p": 640,
        }
        if preset not in mapping:
            raise InvalidParameter(f"Unknown resolution preset '{preset}'")
        h = int(preset.replace("p", ""))
        return mapping[preset], h


class RenderAPI:
    """
    Facade for controlling rendering operations and managing callbacks.
    """
    def __init__(self, service: Optional[RenderService] = None):
        self.service: RenderService = service or RenderService()

    # ---------- Callbacks --------------------------------
    def on_frame(self, cb): self.service.on_frame = cb
    def on_tile(self, cb): self.service.on_tile = cb
    def on_log(self, cb): self.service.on_log = cb

    # ----------- Facade methods --------------------------
    def set_view(self, min_x: float, max_x: float, min_y: float, max_y: float) -> bool:
        """
        Replaces the visible rectangle of the complex plane.

        Returns:
            bool: True if applied now, False if deferred or dropped because a
            render is in flight.
        """
        return self.service.set_viewport(Viewport(min_x, max_x, min_y, max_y))

    def pan_pixels(self, dx_px: float, dy_px: float) -> bool:
        """
        Pans the view by a pointer drag.

        Args:
            dx_px (float): Horizontal drag distance in raster pixels.
            dy_px (float): Vertical drag distance in raster pixels.
        """
        return self.service.drag(dx_px, dy_px)

    def wheel_zoom(self, anchor_u: float, anchor_v: float, scroll_y: float) -> bool:
        """
        Zooms one wheel step around a normalized anchor.

        Args:
            anchor_u (float): Pointer x / image width, in [0, 1].
            anchor_v (float): Pointer y / image height, in [0, 1].
            scroll_y (float): Wheel delta; positive zooms in.
        """
        return self.service.scroll(anchor_u, anchor_v, scroll_y)

    def center(self) -> Tuple[float, float]:
        return self.service.center()

    def configure(self) -> RenderConfigBuilder:
        """
        Configures the renderer with a fluent builder pattern.

        Returns:
            RenderConfigBuilder: A builder object for configuring renderer settings.
        """
        return RenderConfigBuilder(self.service)

    def render(self):
        """Synchronous render; returns the RenderResult."""
        return self.service.render_now()

    def start_async_render(self) -> bool:
        """
        Initiates a render on a worker thread.
        """
        return self.service.start_render()

    def wait(self, timeout: Optional[float] = None) -> None:
        self.service.wait(timeout)

    def shutdown(self) -> None:
        self.service.shutdown()
