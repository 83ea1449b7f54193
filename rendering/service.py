from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple

from fractals.base import Viewport, RenderSettings
from rendering.budget import BudgetSettings, IterationBudgetController
from rendering.core import Renderer
from rendering.events import FrameEvent, TileEvent, LogEvent
from rendering.result import RenderResult
from utils.coords import drag_to_plane_delta, scroll_zoom_factor
from utils.enums import PendingInputPolicy
from utils.errors import InvalidParameter

logger = logging.getLogger(__name__)

# (op, args) where op is one of "pan", "drag", "zoom", "scroll", "reset"
PendingInput = Tuple[str, tuple]


class RenderService:
    """
    UI-facing owner of the mutable view state:
      - the Viewport and raster size,
      - the IterationBudgetController (IDLE/RENDERING + budget),
      - the Renderer,
      - event dispatch (frame/tile/log) and the optional worker thread.

    Pan/zoom input is applied straight away while IDLE. While a render is in
    flight it never touches the viewport: depending on `input_policy` it is
    dropped (DISCARD) or queued and applied once the render completes
    (COALESCE, consecutive pans/drags merged into one delta).
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 800,
        *,
        viewport: Optional[Viewport] = None,
        renderer: Optional[Renderer] = None,
        settings: Optional[RenderSettings] = None,
        budget_settings: Optional[BudgetSettings] = None,
        input_policy: PendingInputPolicy = PendingInputPolicy.DISCARD,
    ) -> None:
        self._check_size(width, height)
        self.width = int(width)
        self.height = int(height)
        self.viewport = viewport or Viewport.default()
        self.renderer = renderer or Renderer(settings=settings)
        self.controller = IterationBudgetController(budget_settings)
        self.input_policy = input_policy

        self.needs_render = True
        self.last_result: Optional[RenderResult] = None

        self._pending: List[PendingInput] = []
        self._lock = threading.RLock()
        self._worker_thread: Optional[threading.Thread] = None
        self._render_seq = 0

        # Callbacks
        self.on_frame: Optional[Callable[[FrameEvent], None]] = None
        self.on_tile: Optional[Callable[[TileEvent], None]] = None
        self.on_log: Optional[Callable[[LogEvent], None]] = None

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------

    @property
    def budget(self) -> int:
        return self.controller.budget

    @property
    def is_rendering(self) -> bool:
        return self.controller.is_rendering

    @property
    def pending_inputs(self) -> List[PendingInput]:
        with self._lock:
            return list(self._pending)

    def center(self) -> Tuple[float, float]:
        with self._lock:
            return self.viewport.center()

    # ---------------------------------------------------------------------
    # Input (pan / zoom)
    # ---------------------------------------------------------------------

    def pan(self, dx: float, dy: float) -> bool:
        """Pan by plane deltas. Returns True if applied to the viewport now."""
        return self._submit("pan", (float(dx), float(dy)))

    def drag(self, dx_px: float, dy_px: float) -> bool:
        """Pan by a pointer drag measured in raster pixels."""
        return self._submit("drag", (float(dx_px), float(dy_px)))

    def zoom(self, anchor_u: float, anchor_v: float, factor: float) -> bool:
        return self._submit("zoom", (float(anchor_u), float(anchor_v), float(factor)))

    def scroll(self, anchor_u: float, anchor_v: float, scroll_y: float) -> bool:
        """Zoom around (u, v) by one wheel step in the direction of scroll_y."""
        if scroll_y == 0:
            return False
        return self._submit("scroll", (float(anchor_u), float(anchor_v), float(scroll_y)))

    def set_viewport(self, viewport: Viewport) -> bool:
        return self._submit("reset", (viewport.copy(),))

    def _submit(self, op: str, args: tuple) -> bool:
        with self._lock:
            # Validate against a scratch copy so bad input fails at the call site
            self._apply(self.viewport.copy(), op, args)

            if not self.controller.is_rendering:
                self._apply(self.viewport, op, args)
                self.needs_render = True
                return True

            if self.input_policy == PendingInputPolicy.DISCARD:
                logger.debug("Ignoring %s%r while rendering", op, args)
                return False

            self._enqueue(op, args)
            return False

    def _enqueue(self, op: str, args: tuple) -> None:
        if self._pending and op in ("pan", "drag") and self._pending[-1][0] == op:
            _, (ax, ay) = self._pending[-1]
            self._pending[-1] = (op, (ax + args[0], ay + args[1]))
        else:
            self._pending.append((op, args))

    def _apply(self, vp: Viewport, op: str, args: tuple) -> None:
        if op == "pan":
            vp.pan(*args)
        elif op == "drag":
            dx, dy = drag_to_plane_delta(args[0], args[1], vp, self.width, self.height)
            vp.pan(dx, dy)
        elif op == "zoom":
            vp.zoom(*args)
        elif op == "scroll":
            u, v, scroll_y = args
            vp.zoom(u, v, scroll_zoom_factor(scroll_y))
        elif op == "reset":
            new = args[0]
            vp.min_x, vp.max_x, vp.min_y, vp.max_y = new.min_x, new.max_x, new.min_y, new.max_y
        else:
            raise InvalidParameter(f"Unknown input op: {op}")

    def _settle_pending(self) -> None:
        pending, self._pending = self._pending, []
        if self.input_policy != PendingInputPolicy.COALESCE:
            return
        for op, args in pending:
            try:
                self._apply(self.viewport, op, args)
            except InvalidParameter as e:
                # Valid when queued, but may collapse the view after earlier inputs
                logger.warning("Dropping deferred %s: %s", op, e)
                continue
            self.needs_render = True

    # ---------------------------------------------------------------------
    # Configuration
    # ---------------------------------------------------------------------

    @staticmethod
    def _check_size(width: int, height: int) -> None:
        if int(width) < 0 or int(height) < 0:
            raise InvalidParameter(f"Raster size must be >= 0, got {width}x{height}")

    def set_image_size(self, width: int, height: int) -> None:
        self._check_size(width, height)
        with self._lock:
            self.width, self.height = int(width), int(height)
            self.needs_render = True

    def set_input_policy(self, policy: PendingInputPolicy) -> None:
        with self._lock:
            self.input_policy = policy

    def increase_target(self) -> float:
        with self._lock:
            self.needs_render = True
            return self.controller.increase_target()

    def decrease_target(self) -> float:
        with self._lock:
            self.needs_render = True
            return self.controller.decrease_target()

    def increase_cap(self) -> int:
        with self._lock:
            self.needs_render = True
            return self.controller.increase_cap()

    def decrease_cap(self) -> int:
        with self._lock:
            self.needs_render = True
            return self.controller.decrease_cap()

    def request_render(self) -> None:
        """Manual re-render."""
        with self._lock:
            self.needs_render = True

    # ---------------------------------------------------------------------
    # Render cycle
    # ---------------------------------------------------------------------

    def _begin(self) -> Tuple[int, Viewport, int, int, int]:
        with self._lock:
            budget = self.controller.begin_render()
            self._render_seq += 1
            self.needs_render = False
            return budget, self.viewport.copy(), self.width, self.height, self._render_seq

    def _execute(self, budget: int, snapshot: Viewport, width: int, height: int,
                 seq: int) -> RenderResult:
        engine = self.renderer.engine
        if self.on_tile is not None:
            def on_tile(x0, y0, part) -> None:
                h, w = part.shape
                self.on_tile(TileEvent(x0, y0, w, h, seq, width, height))
            engine.on_tile = on_tile
        else:
            engine.on_tile = None

        try:
            result = self.renderer.render(snapshot, width, height, budget)
        except Exception:
            with self._lock:
                self.controller.abort_render()
                self._settle_pending()
            raise

        with self._lock:
            next_budget = self.controller.finish_render(result.duration)
            self.last_result = result
            self._settle_pending()

        if self.on_frame:
            self.on_frame(FrameEvent(result, seq, next_budget))
        self._log(f"Render time: {result.duration:.3f}s, Iterations: {budget}")
        return result

    def render_now(self) -> RenderResult:
        """Synchronous render cycle: IDLE -> RENDERING -> IDLE."""
        return self._execute(*self._begin())

    def render_if_needed(self) -> Optional[RenderResult]:
        if not self.needs_render or self.is_rendering:
            return None
        return self.render_now()

    def start_render(self) -> bool:
        """
        Runs one render cycle on a worker thread. The RENDERING state is
        claimed before the thread starts; returns False if a render is
        already in flight.
        """
        try:
            args = self._begin()
        except RuntimeError:
            return False
        self._worker_thread = threading.Thread(target=self._run_worker, args=args,
                                               daemon=True)
        self._worker_thread.start()
        return True

    def _run_worker(self, *args) -> None:
        try:
            self._execute(*args)
        except Exception as e:
            logger.exception("Render failed")
            if self.on_log:
                self.on_log(LogEvent(f"[RenderService] Render error: {e}", level="error"))

    def wait(self, timeout: Optional[float] = None) -> None:
        thread = self._worker_thread
        if thread is not None:
            thread.join(timeout)

    def shutdown(self) -> None:
        """Wait for an in-flight render and release backend resources."""
        try:
            self.wait()
        finally:
            self.renderer.close()

    def _log(self, message: str, level: Optional[str] = None) -> None:
        logger.info(message)
        if self.on_log:
            self.on_log(LogEvent(message, level=level))
