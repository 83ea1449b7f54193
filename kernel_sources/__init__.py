# Kernel sources package
from .cpu.escape_time import (escape_count, escape_counts_cpu_f64,
                              escape_counts_tile_f64)

__all__ = [
    "escape_count",
    "escape_counts_cpu_f64",
    "escape_counts_tile_f64",
]
