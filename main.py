import argparse
import logging
import sys

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from api.render_api import RenderAPI
from rendering.service import RenderService
from ui.view import FractalViewer
from utils.enums import BackendType, EngineMode


def build_parser():
    parser = argparse.ArgumentParser(description="Interactive Mandelbrot viewer")
    parser.add_argument('--width', type=int, default=800, help='raster width in pixels')
    parser.add_argument('--height', type=int, default=800, help='raster height in pixels')
    parser.add_argument('--backend', choices=[b.name for b in BackendType], default='AUTO',
                        help='escape-count backend')
    parser.add_argument('--engine', choices=[e.name for e in EngineMode], default='FULL_FRAME',
                        help='full-frame or tiled rendering')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    service = RenderService(args.width, args.height)
    (RenderAPI(service).configure()
        .backend(BackendType[args.backend])
        .engine_mode(EngineMode[args.engine])
        .apply())

    app = QApplication(sys.argv[:1])
    viewer = FractalViewer(service)
    viewer.show()
    QTimer.singleShot(0, viewer.render_fractal)
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
