import numpy as np
from numba import njit, prange


@njit(cache=True, nogil=True)
def escape_count(cr, ci, max_iter):
    zr = 0.0
    zi = 0.0
    n = 0
    while n < max_iter and zr*zr + zi*zi <= 4.0:
        tmp = zr*zr - zi*zi + cr
        zi = 2.0*zr*zi + ci
        zr = tmp
        n += 1
    return n


@njit(cache=True, parallel=True)
def escape_counts_cpu_f64(min_x, max_x, min_y, max_y,
                          width, height, x0, y0, w, h, max_iter):
    """
    Escape counts for the pixel region [x0, x0+w) x [y0, y0+h) of a
    width x height raster. Pixels are mapped with the full-raster formula so
    a region's counts match the same pixels of a full-frame render.
    Rows run in parallel.
    """
    out = np.zeros((h, w), dtype=np.int32)
    span_x = max_x - min_x
    span_y = max_y - min_y
    for j in prange(h):
        ci = min_y + ((y0 + j) / height) * span_y
        for i in range(w):
            cr = min_x + ((x0 + i) / width) * span_x
            out[j, i] = escape_count(cr, ci, max_iter)
    return out


@njit(cache=True, nogil=True)
def escape_counts_tile_f64(min_x, max_x, min_y, max_y,
                           width, height, x0, y0, w, h, max_iter):
    # Serial twin of escape_counts_cpu_f64 for callers that bring their own
    # threads; releases the GIL so tiles overlap.
    out = np.zeros((h, w), dtype=np.int32)
    span_x = max_x - min_x
    span_y = max_y - min_y
    for j in range(h):
        ci = min_y + ((y0 + j) / height) * span_y
        for i in range(w):
            cr = min_x + ((x0 + i) / width) * span_x
            out[j, i] = escape_count(cr, ci, max_iter)
    return out
