import pytest

from api.render_api import RenderAPI, RenderConfigBuilder
from backends.python_backend import PythonBackend
from coloring.gradient import GradientColoring
from coloring.log_ratio import LogRatioColoring
from fractals.base import Viewport
from rendering.engines.tile import TileEngine
from rendering.service import RenderService
from utils.enums import BackendType, ColoringMode, EngineMode, PendingInputPolicy
from utils.errors import InvalidParameter


@pytest.fixture
def api():
    api = RenderAPI(RenderService(8, 8))
    yield api
    api.shutdown()


def test_builder_applies_settings(api):
    service = (api.configure()
               .size(12, 10)
               .backend(BackendType.PYTHON)
               .engine_mode(EngineMode.TILED, tile_w=4, tile_h=5)
               .coloring(ColoringMode.GRADIENT, palette="Ocean")
               .target_duration(2.5)
               .iteration_cap(6)
               .input_policy(PendingInputPolicy.COALESCE)
               .apply())
    assert service is api.service
    assert (service.width, service.height) == (12, 10)
    assert isinstance(service.renderer.backend, PythonBackend)
    assert isinstance(service.renderer.engine, TileEngine)
    assert (service.renderer.engine.tile_w, service.renderer.engine.tile_h) == (4, 5)
    assert isinstance(service.renderer.coloring, GradientColoring)
    assert service.controller.target_duration == 2.5
    assert service.controller.cap == 6
    assert service.input_policy == PendingInputPolicy.COALESCE
    assert service.needs_render


def test_builder_steps_down(api):
    api.configure().target_duration(3.5).iteration_cap(9).apply()
    api.configure().target_duration(1.5).iteration_cap(4).apply()
    assert api.service.controller.target_duration == 1.5
    assert api.service.controller.cap == 4
    # Below the minimum stops at the minimum
    api.configure().target_duration(0.1).iteration_cap(1).apply()
    assert api.service.controller.target_duration == 0.5
    assert api.service.controller.cap == 3


def test_builder_log_ratio_coloring(api):
    api.configure().coloring(ColoringMode.LOG_RATIO).apply()
    assert isinstance(api.service.renderer.coloring, LogRatioColoring)


def test_resolution_presets():
    assert RenderConfigBuilder._compute_size("720p") == (1280, 720)
    assert RenderConfigBuilder._compute_size("2160p") == (3840, 2160)
    with pytest.raises(InvalidParameter):
        RenderConfigBuilder._compute_size("999p")


def test_facade_navigation(api):
    assert api.set_view(-1.0, 1.0, -1.0, 1.0)
    assert api.center() == (0.0, 0.0)
    assert api.pan_pixels(4, 0)
    assert api.center() == pytest.approx((-1.0, 0.0))
    assert api.wheel_zoom(0.5, 0.5, 120)
    assert api.service.viewport.span[0] < 2.0
    with pytest.raises(InvalidParameter):
        api.set_view(1.0, -1.0, -1.0, 1.0)


def test_facade_render(api):
    api.configure().backend(BackendType.PYTHON).apply()
    frames = []
    api.on_frame(frames.append)
    result = api.render()
    assert result.counts.shape == (8, 8)
    assert frames[0].result is result
    assert api.service.viewport == Viewport.default()


def test_facade_async_render(api):
    api.configure().backend(BackendType.PYTHON).apply()
    frames = []
    api.on_frame(frames.append)
    assert api.start_async_render()
    api.wait(10.0)
    assert len(frames) == 1
