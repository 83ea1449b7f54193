from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage

from api.render_api import RenderAPI
from utils.image_helpers import ndarray_to_qimage
from rendering.events import FrameEvent, LogEvent


class QtRenderBridge(QObject):
    """
    Thin adapter that converts service events to Qt signals for the UI.
    Service callbacks fire on the render worker thread; the signals are
    delivered to receivers in the UI thread.
    """
    # (image, render_w, render_h)
    image_updated = Signal(QImage, int, int)
    # (render seconds, budget used, next budget)
    stats_updated = Signal(float, int, int)
    log_text = Signal(str)

    def __init__(self, api: RenderAPI, parent=None):
        super().__init__(parent)
        self.api = api

        # Subscribe to API events with conversions
        self.api.on_frame(self._on_frame)
        self.api.on_log(self._on_log)

    # --------- Conversions ---------------------
    def _on_frame(self, evt: FrameEvent) -> None:
        result = evt.result
        qimg = ndarray_to_qimage(result.rgb)
        self.image_updated.emit(qimg, result.width, result.height)
        self.stats_updated.emit(float(result.duration), int(result.budget), int(evt.next_budget))

    def _on_log(self, evt: LogEvent) -> None:
        self.log_text.emit(evt.message)
