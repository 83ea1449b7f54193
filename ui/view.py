import logging
from datetime import datetime

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QMainWindow, QLabel, QVBoxLayout, QHBoxLayout, QWidget, QPushButton,
    QPlainTextEdit
)

from adapters.qt_render_bridge import QtRenderBridge
from api.render_api import RenderAPI
from rendering.service import RenderService
from ui.view_components import FractalCanvas

logger = logging.getLogger(__name__)


# =============================================================================
# Main Window
# =============================================================================
class FractalViewer(QMainWindow):
    """
    Interactive Mandelbrot viewer. Drag with the left button to pan, use the
    wheel to zoom around the pointer. Every finished render retunes the
    iteration budget towards the target render time.
    """
    poll_interval_ms = 30

    # ---------- Construction & UI wiring ----------
    def __init__(self, service: RenderService = None):
        super().__init__()
        self.setWindowTitle("Mandelbrot Viewer")
        self.setGeometry(100, 100, 820, 950)

        self.api = RenderAPI(service or RenderService(800, 800))
        self.service = self.api.service
        self.bridge = QtRenderBridge(self.api, parent=self)
        self.bridge.image_updated.connect(self.update_image)
        self.bridge.stats_updated.connect(self._on_stats)
        self.bridge.log_text.connect(self.log)

        self.view_image: QImage = None
        self._build_ui()

        # Render loop: start a render whenever the view is dirty and idle
        self.render_timer = QTimer(self)
        self.render_timer.timeout.connect(self.render_fractal)
        self.render_timer.start(self.poll_interval_ms)

    def _build_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(10, 8, 10, 8)

        heading = QLabel("Interactive Mandelbrot Set Viewer")
        heading.setStyleSheet("font-size: 16px; font-weight: bold;")
        layout.addWidget(heading)
        layout.addWidget(QLabel("Use mouse wheel to zoom, drag left mouse button to pan."))

        self.display = FractalCanvas(self)
        self.display.drag_finished.connect(self._on_drag)
        self.display.wheel_scrolled.connect(self._on_wheel)
        layout.addWidget(self.display, stretch=1)

        self.center_label = QLabel()
        self.stats_label = QLabel("Rendering...")
        layout.addWidget(self.center_label)
        layout.addWidget(self.stats_label)

        # Target render time
        target_row = QHBoxLayout()
        target_minus = QPushButton("-")
        target_plus = QPushButton("+")
        self.target_label = QLabel()
        target_minus.clicked.connect(self._decrease_target)
        target_plus.clicked.connect(self._increase_target)
        target_row.addWidget(target_minus)
        target_row.addWidget(self.target_label)
        target_row.addWidget(target_plus)
        target_row.addStretch(1)
        layout.addLayout(target_row)

        # Iteration ceiling
        cap_row = QHBoxLayout()
        cap_minus = QPushButton("-")
        cap_plus = QPushButton("+")
        self.cap_label = QLabel()
        cap_minus.clicked.connect(self._decrease_cap)
        cap_plus.clicked.connect(self._increase_cap)
        cap_row.addWidget(cap_minus)
        cap_row.addWidget(self.cap_label)
        cap_row.addWidget(cap_plus)
        cap_row.addStretch(1)
        layout.addLayout(cap_row)

        rerender = QPushButton("Re-render")
        rerender.clicked.connect(self._manual_rerender)
        layout.addWidget(rerender, alignment=Qt.AlignmentFlag.AlignLeft)

        self.log_view = QPlainTextEdit(self)
        self.log_view.setReadOnly(True)
        self.log_view.setMaximumBlockCount(2000)
        self.log_view.setMaximumHeight(120)
        self.log_view.setStyleSheet(
            "background: #0f0f10; color: #cfd2d6; font-family: Consolas, monospace; font-size: 11px;"
        )
        layout.addWidget(self.log_view)

        container = QWidget()
        container.setLayout(layout)
        self.setCentralWidget(container)
        self._refresh_labels()

    # ---------- Labels ----------
    def _refresh_labels(self):
        cx, cy = self.service.center()
        self.center_label.setText(f"Center: ({cx:.30f}, {cy:.30f})")
        self.target_label.setText(
            f"Target render time: {self.service.controller.target_duration:.1f}s")
        self.cap_label.setText(f"Max. {self.service.controller.ceiling} iterations")

    def _on_stats(self, duration: float, budget: int, next_budget: int):
        self.stats_label.setText(
            f"Render time: {duration:.3f}s, Iterations: {budget} (next: {next_budget})")
        self._refresh_labels()

    # ---------- Parameter buttons ----------
    def _decrease_target(self):
        self.service.decrease_target()
        self._refresh_labels()

    def _increase_target(self):
        self.service.increase_target()
        self._refresh_labels()

    def _decrease_cap(self):
        self.service.decrease_cap()
        self._refresh_labels()

    def _increase_cap(self):
        self.service.increase_cap()
        self._refresh_labels()

    def _manual_rerender(self):
        self.log("Manual re-render triggered.")
        self.service.request_render()

    # ---------- Input ----------
    def _label_to_raster(self, dx: float, dy: float):
        sx = self.service.width / max(1, self.display.width())
        sy = self.service.height / max(1, self.display.height())
        return dx * sx, dy * sy

    def _on_drag(self, dx: float, dy: float):
        if self.service.is_rendering:
            logger.debug("Drag ignored while rendering")
            self.display.reset_drag()
            return
        self.api.pan_pixels(*self._label_to_raster(dx, dy))
        self._refresh_labels()

    def _on_wheel(self, u: float, v: float, scroll_y: float):
        self.api.wheel_zoom(u, v, scroll_y)
        self._refresh_labels()

    # ---------- Rendering control ----------
    def render_fractal(self):
        if not self.service.needs_render or self.service.is_rendering:
            return
        if self.api.start_async_render():
            self.stats_label.setText("Rendering...")

    def update_image(self, image: QImage, render_w: int, render_h: int):
        if image.isNull():
            return
        self.view_image = image
        self.display.setPixmap(QPixmap.fromImage(image))

    # ---------- Logging ----------
    def log(self, message: str):
        ts = datetime.now().strftime("%H:%M:%S")
        self.log_view.appendPlainText(f"[{ts}] {message}")

    def closeEvent(self, event):
        self.render_timer.stop()
        self.api.shutdown()
        super().closeEvent(event)
