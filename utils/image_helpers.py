import numpy as np
from PySide6.QtGui import QImage


def ndarray_to_qimage(arr: np.ndarray) -> QImage:
    """
    Convert a ndarray of shape (h,w) or (h,w,3) [RGB] into a QImage.
    Returns a QImage that owns its memory (deep copy).
    """
    arr = np.ascontiguousarray(arr, dtype=np.uint8)
    if arr.ndim == 2:
        h, w = arr.shape
        qimg = QImage(arr.data.tobytes(), w, h, w, QImage.Format.Format_Grayscale8)
        return qimg.copy()

    if arr.ndim == 3 and arr.shape[2] == 3:
        h, w, _ = arr.shape
        # Qt expects RGB888
        bytes_per_line = 3 * w
        qimg = QImage(arr.data.tobytes(), w, h, bytes_per_line, QImage.Format.Format_RGB888)
        return qimg.copy()

    raise ValueError(f"Unsupported ndarray shape {arr.shape}")
