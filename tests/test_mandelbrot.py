import numpy as np
import pytest

from fractals.base import RenderSettings, Viewport
from fractals.mandelbrot import MandelbrotFractal
from kernel_sources import escape_counts_cpu_f64, escape_counts_tile_f64
from utils.errors import InvalidParameter


@pytest.fixture
def fractal():
    return MandelbrotFractal()


def test_origin_never_escapes(fractal):
    assert fractal.iterate(0j, 50) == 50
    assert fractal.iterate(complex(-1.0, 0.0), 100) == 100


def test_known_escape_counts(fractal):
    assert fractal.iterate(complex(3.0, 0.0), 10) == 1
    # |z|^2 == 4 is still inside the escape radius
    assert fractal.iterate(complex(2.0, 0.0), 10) == 2


@pytest.mark.parametrize("c", [complex(2.5, 0), complex(0, -3), complex(-1.6, 1.6), complex(10, 10)])
def test_points_outside_radius_escape_after_one_step(fractal, c):
    assert fractal.iterate(c, 1000) == 1


def test_count_is_monotone_in_budget(fractal):
    rng = np.random.default_rng(7)
    for _ in range(200):
        c = complex(rng.uniform(-2.0, 0.5), rng.uniform(-1.2, 1.2))
        counts = [fractal.iterate(c, b) for b in (1, 5, 20, 80)]
        assert counts == sorted(counts)
        assert all(n <= b for n, b in zip(counts, (1, 5, 20, 80)))


def test_backend_spec_rejects_float32(fractal):
    with pytest.raises(InvalidParameter):
        fractal.get_backend_spec(RenderSettings(precision=np.float32), "CPU")


def test_backend_spec_unknown_backend(fractal):
    with pytest.raises(NotImplementedError):
        fractal.get_backend_spec(RenderSettings(), "CUDA")


def test_backend_spec_cpu(fractal):
    spec = fractal.get_backend_spec(RenderSettings(), "CPU")
    assert spec["kernel_source"] is escape_counts_cpu_f64
    assert spec["tile_kernel_source"] is escape_counts_tile_f64
    assert spec["precision"] == np.float64


def _kernel_args(vp, width, height, region, budget):
    x0, y0, w, h = region
    return (vp.min_x, vp.max_x, vp.min_y, vp.max_y, width, height, x0, y0, w, h, budget)


def test_kernel_matches_scalar_iterate(fractal):
    vp = Viewport.default()
    width, height, budget = 32, 24, 60
    counts = escape_counts_cpu_f64(*_kernel_args(vp, width, height, (0, 0, width, height), budget))
    assert counts.shape == (height, width)
    assert counts.dtype == np.int32

    expected = np.empty_like(counts)
    for py in range(height):
        for px in range(width):
            x, y = vp.pixel_to_plane(px, py, width, height)
            expected[py, px] = fractal.iterate(complex(x, y), budget)
    assert np.mean(counts == expected) >= 0.99


def test_region_matches_full_frame():
    vp = Viewport(-1.0, 0.5, -0.8, 0.7)
    width, height, budget = 40, 30, 80
    full = escape_counts_cpu_f64(*_kernel_args(vp, width, height, (0, 0, width, height), budget))
    region = (13, 7, 11, 9)
    part_parallel = escape_counts_cpu_f64(*_kernel_args(vp, width, height, region, budget))
    part_serial = escape_counts_tile_f64(*_kernel_args(vp, width, height, region, budget))
    x0, y0, w, h = region
    np.testing.assert_array_equal(part_parallel, full[y0:y0 + h, x0:x0 + w])
    np.testing.assert_array_equal(part_serial, full[y0:y0 + h, x0:x0 + w])
