import math

import pytest

from fractals.base import Viewport
from utils.coords import (SCROLL_ZOOM_STEP, drag_to_plane_delta,
                          normalized_anchor, scroll_zoom_factor)


def test_scroll_zoom_factor():
    assert scroll_zoom_factor(120) == pytest.approx(math.exp(SCROLL_ZOOM_STEP))
    assert scroll_zoom_factor(-1) == pytest.approx(math.exp(-SCROLL_ZOOM_STEP))
    assert scroll_zoom_factor(0) == 1.0
    assert scroll_zoom_factor(3, k=0.1) == pytest.approx(math.exp(0.1))


def test_normalized_anchor_clamps():
    assert normalized_anchor(200, 100, 400, 400) == (0.5, 0.25)
    assert normalized_anchor(-5, 500, 400, 400) == (0.0, 1.0)
    assert normalized_anchor(0, 0, 0, 0) == (0.0, 0.0)


def test_drag_to_plane_delta():
    vp = Viewport.default()
    dx, dy = drag_to_plane_delta(100, -50, vp, 400, 300)
    assert dx == pytest.approx(-100 * 3.5 / 400)
    assert dy == pytest.approx(50 * 3.0 / 300)
