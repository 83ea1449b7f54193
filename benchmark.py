import csv
import os
import platform
import time

from backends.backend_manager import select_backend
from fractals.base import Viewport, RenderSettings
from rendering.core import Renderer
from rendering.service import RenderService
from utils.enums import BackendType, EngineMode

cpu_info = platform.processor() or platform.machine()


def benchmark_renderer(renderer, name, width, height, budget, runs=3):
    print(f'Benchmarking {name} ({runs} runs)...')
    vp = Viewport.default()
    # Warm-up (numba compilation)
    renderer.render(vp, 16, 16, budget)
    times = []
    for _ in range(runs):
        start = time.perf_counter()
        renderer.render(vp, width, height, budget)
        times.append(time.perf_counter() - start)
    avg_time = sum(times) / runs
    fps = 1.0 / avg_time if avg_time > 0 else 0
    print(f'{name} average render time: {avg_time:.3f}s | FPS: {fps:.2f}')
    return avg_time, fps


def benchmark_controller(frames=10, width=400, height=400, cap=12):
    """Renders `frames` times and reports how the budget settles."""
    service = RenderService(width, height)
    while service.controller.cap < cap:
        service.increase_cap()
    rows = []
    for frame in range(frames):
        result = service.render_now()
        rows.append((frame, result.budget, result.duration, service.budget))
        print(f'frame {frame}: budget={result.budget} '
              f'render={result.duration:.3f}s next={service.budget}')
    service.shutdown()
    return rows


def main():
    resolutions = [(200, 200), (400, 400), (800, 800)]
    budget = 256
    renderers = {
        'CPU': Renderer(settings=RenderSettings(backend=BackendType.CPU)),
        'CPU tiled': Renderer(settings=RenderSettings(backend=BackendType.CPU,
                                                      engine_mode=EngineMode.TILED)),
        'Python': Renderer(backend=select_backend(BackendType.PYTHON)),
    }

    csv_file = 'benchmark_results.csv'

    if os.path.exists(csv_file):
        os.remove(csv_file)

    with open(csv_file, 'w', newline='') as f:
        writer = csv.writer(f)
        # Hardware summary header
        writer.writerow(['Hardware Summary'])
        writer.writerow(['CPU', cpu_info])
        writer.writerow(['Budget', budget])
        writer.writerow([])
        headers = ['Resolution']
        for name in renderers:
            headers += [f'{name} Time (s)', f'{name} FPS']
        writer.writerow(headers)
        for width, height in resolutions:
            print(f'=== Benchmarking resolution: {width}x{height} ===')
            row = [f'{width}x{height}']
            for name, renderer in renderers.items():
                # The pure-Python backend is only practical at small sizes
                if name == 'Python' and width * height > 200 * 200:
                    row += ['', '']
                    continue
                t, fps = benchmark_renderer(renderer, name, width, height, budget)
                row += [f'{t:.3f}', f'{fps:.2f}']
            writer.writerow(row)

        writer.writerow([])
        writer.writerow(['Frame', 'Budget', 'Render Time (s)', 'Next Budget'])
        for frame, used, duration, nxt in benchmark_controller():
            writer.writerow([frame, used, f'{duration:.3f}', nxt])
        print(f'Benchmark results saved to {csv_file}')

    for renderer in renderers.values():
        renderer.close()


if __name__ == '__main__':
    main()
