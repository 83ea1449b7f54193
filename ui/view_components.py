from typing import Optional, Tuple

from PySide6.QtCore import Qt, Signal, QPointF
from PySide6.QtGui import QMouseEvent, QWheelEvent
from PySide6.QtWidgets import QLabel, QSizePolicy

from utils.coords import normalized_anchor


class FractalCanvas(QLabel):
    """
    Display label for the rendered raster that decodes pointer input.

    A left-button drag is reported once, on release, as the total
    displacement in label pixels. Wheel events are reported with the
    pointer position normalized to [0, 1] and the vertical wheel delta.
    """
    drag_finished = Signal(float, float)
    wheel_scrolled = Signal(float, float, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setScaledContents(True)
        self.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self.setMinimumSize(200, 200)
        self._press_pos: Optional[QPointF] = None

    def normalized(self, pos: QPointF) -> Tuple[float, float]:
        return normalized_anchor(pos.x(), pos.y(), self.width(), self.height())

    def reset_drag(self) -> None:
        self._press_pos = None

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._press_pos = event.position()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton and self._press_pos is not None:
            delta = event.position() - self._press_pos
            self._press_pos = None
            if delta.x() or delta.y():
                self.drag_finished.emit(float(delta.x()), float(delta.y()))
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        dy = event.angleDelta().y()
        if dy:
            u, v = self.normalized(event.position())
            self.wheel_scrolled.emit(u, v, float(dy))
        event.accept()
