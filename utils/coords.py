import math

from fractals.base import Viewport

SCROLL_ZOOM_STEP = 0.8


def scroll_zoom_factor(scroll_y: float, k: float = SCROLL_ZOOM_STEP) -> float:
    """
    Zoom factor for one wheel event: exp(sign(scroll_y) * k).
    Scrolling up (positive) zooms in, down zooms out, zero is a no-op (1.0).
    """
    if scroll_y > 0:
        sign = 1.0
    elif scroll_y < 0:
        sign = -1.0
    else:
        sign = 0.0
    return math.exp(sign * k)


def normalized_anchor(px, py, image_width, image_height):
    """Pointer position -> (u, v) in [0, 1]^2, clamped to the image."""
    w = max(1.0, float(image_width))
    h = max(1.0, float(image_height))
    u = min(max(float(px), 0.0), w) / w
    v = min(max(float(py), 0.0), h) / h
    return u, v


def drag_to_plane_delta(dx_px, dy_px, viewport: Viewport, image_width,
                        image_height):
    """
    Converts a pointer drag (in pixels) to the pan delta in plane units.
    A one-pixel drag moves the view by one pixel's worth of plane distance;
    the sign is flipped so the image follows the pointer.
    """
    span_x, span_y = viewport.span
    dx = -float(dx_px) * span_x / float(max(1, image_width))
    dy = -float(dy_px) * span_y / float(max(1, image_height))
    return dx, dy
