import numpy as np
from scipy.interpolate import interp1d


def apply_gamma_correction(palette: np.ndarray, gamma: float = 0.8) -> np.ndarray:
    """
    Applies gamma correction to an (N, 3) float palette in 0-255.
    gamma < 1 brightens, > 1 darkens.
    """
    return 255.0 * np.power(np.clip(palette, 0.0, 255.0) / 255.0, gamma)


def stretch_contrast(palette: np.ndarray) -> np.ndarray:
    """Linearly stretches each RGB channel to span the full 0-255 range."""
    min_vals = palette.min(axis=0)
    max_vals = palette.max(axis=0)
    return (palette - min_vals) / (max_vals - min_vals + 1e-5) * 255


def create_smooth_gradient(stops, resolution=256, interpolation='cubic',
                           gamma=0.8) -> np.ndarray:
    """
    Generates a smooth (resolution, 3) uint8 gradient through the RGB stops.

    Parameters:
        stops (list of tuple): RGB tuples (0-255) defining the base colors.
        resolution (int): Number of colors in the output gradient.
        interpolation (str): scipy interp1d kind ('linear', 'cubic', ...).
        gamma (float): Gamma applied after interpolation.
    """
    if len(stops) < 2:
        raise ValueError("Palette must contain at least two colors for interpolation.")
    if interpolation == 'cubic' and len(stops) < 4:
        interpolation = 'linear'

    stops = np.array(stops, dtype=np.float64)
    indices = np.arange(len(stops), dtype=np.float64)
    interp_func = interp1d(indices, stops, kind=interpolation, axis=0)
    smooth = interp_func(np.linspace(0, len(stops) - 1, num=resolution))
    smooth = stretch_contrast(apply_gamma_correction(smooth, gamma))
    return np.clip(np.rint(smooth), 0, 255).astype(np.uint8)


_STOPS = {
    "Classic": [
        (0, 0, 0), (66, 30, 15), (25, 7, 26), (9, 1, 47), (4, 4, 73),
        (0, 7, 100), (12, 44, 138), (24, 82, 177), (57, 125, 209),
        (134, 181, 229), (211, 236, 248), (241, 233, 191), (248, 201, 95),
        (255, 170, 0), (204, 128, 0), (153, 87, 0), (106, 52, 3)],
    "Ocean": [
        (0, 0, 0), (0, 32, 64), (0, 64, 128), (0, 96, 192),
        (0, 128, 255), (64, 160, 255), (128, 192, 255)],
    "Teal": [
        (0, 20, 20), (100, 0, 60), (100, 60, 140), (100, 160, 220),
        (100, 255, 255)],
    "Grayscale": [
        (0, 0, 0), (64, 64, 64), (128, 128, 128), (192, 192, 192),
        (255, 255, 255)],
}

_cache = {}


def palette_names():
    return sorted(_STOPS)


def get_palette(name: str) -> np.ndarray:
    """Built lazily; palettes are immutable once created."""
    if name not in _STOPS:
        raise KeyError(f"Unknown palette '{name}'. Available: {palette_names()}")
    if name not in _cache:
        pal = create_smooth_gradient(_STOPS[name])
        pal.setflags(write=False)
        _cache[name] = pal
    return _cache[name]
