import numpy as np
import pytest

from backends.backend_manager import available_backends, select_backend
from backends.cpu_backend import CpuBackend
from backends.python_backend import PythonBackend
from fractals.base import RenderSettings, Viewport
from rendering.core import Renderer, make_engine
from rendering.engines.full_frame import FullFrameEngine
from rendering.engines.tile import TileEngine
from utils.enums import BackendType, EngineMode
from utils.errors import InvalidParameter


@pytest.fixture
def renderer():
    r = Renderer(settings=RenderSettings(backend=BackendType.CPU))
    yield r
    r.close()


def test_select_backend():
    assert available_backends() == ["CPU", "PYTHON"]
    assert isinstance(select_backend(), CpuBackend)
    assert isinstance(select_backend(BackendType.PYTHON), PythonBackend)


def test_make_engine():
    assert isinstance(make_engine(RenderSettings()), FullFrameEngine)
    engine = make_engine(RenderSettings(engine_mode=EngineMode.TILED, tile_w=16, tile_h=8))
    assert isinstance(engine, TileEngine)
    assert (engine.tile_w, engine.tile_h) == (16, 8)


def test_four_by_four_frame(renderer):
    result = renderer.render(Viewport.default(), 4, 4, 25)
    assert result.rgb.shape == (4, 4, 3)
    assert result.counts.shape == (4, 4)
    assert result.budget == 25
    assert result.duration >= 0.0

    # (-2.5, -1.5) escapes on the first step
    assert result.count_at(0, 0) == 1
    assert result.pixel(0, 0) == (100, 0, 54)
    # (0.125, 0.0) lies in the main cardioid
    assert result.count_at(3, 2) == 25
    assert result.pixel(3, 2) == (0, 20, 20)


def test_result_is_read_only(renderer):
    result = renderer.render(Viewport.default(), 8, 8, 10)
    with pytest.raises(ValueError):
        result.counts[0, 0] = 0
    with pytest.raises(ValueError):
        result.rgb[0, 0, 0] = 0


def test_render_does_not_touch_viewport(renderer):
    vp = Viewport.default()
    result = renderer.render(vp, 8, 8, 10)
    assert vp == Viewport.default()
    assert result.viewport == vp
    assert result.viewport is not vp


@pytest.mark.parametrize("size", [(0, 4), (4, 0), (0, 0)])
def test_zero_sized_raster_is_empty(renderer, size):
    width, height = size
    result = renderer.render(Viewport.default(), width, height, 25)
    assert result.is_empty
    assert result.width == width
    assert result.height == height


def test_bad_arguments(renderer):
    with pytest.raises(InvalidParameter):
        renderer.render(Viewport.default(), -1, 4, 25)
    with pytest.raises(InvalidParameter):
        renderer.render(Viewport.default(), 4, 4, 0)


def test_tiled_matches_full_frame(renderer):
    vp = Viewport(-1.8, 0.6, -1.1, 1.1)
    full = renderer.render(vp, 23, 17, 64)

    tiles = []
    tiled = Renderer(engine=TileEngine(tile_w=7, tile_h=5, max_workers=3,
                                       on_tile=lambda x0, y0, part: tiles.append((x0, y0, part.shape))),
                     backend=CpuBackend())
    result = tiled.render(vp, 23, 17, 64)
    np.testing.assert_array_equal(result.counts, full.counts)
    np.testing.assert_array_equal(result.rgb, full.rgb)
    # ceil(23 / 7) * ceil(17 / 5) tiles, every pixel covered once
    assert len(tiles) == 4 * 4
    assert sum(h * w for _, _, (h, w) in tiles) == 23 * 17


def test_center_first_order_covers_raster(renderer):
    vp = Viewport.default()
    full = renderer.render(vp, 20, 20, 30)
    engine = TileEngine(tile_w=6, tile_h=6, order="center-first")
    tiled = Renderer(engine=engine, backend=CpuBackend()).render(vp, 20, 20, 30)
    np.testing.assert_array_equal(tiled.counts, full.counts)


def test_python_backend_agrees_with_cpu(renderer):
    vp = Viewport(-2.0, 0.5, -1.25, 1.25)
    cpu = renderer.render(vp, 24, 18, 40)
    py = Renderer(backend=select_backend(BackendType.PYTHON)).render(vp, 24, 18, 40)
    assert np.mean(cpu.counts == py.counts) >= 0.99


def test_cpu_backend_requires_compile():
    with pytest.raises(RuntimeError):
        CpuBackend().render(None, Viewport.default(), 4, 4, 10)
