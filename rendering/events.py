from dataclasses import dataclass
from typing import Optional

from rendering.result import RenderResult

@dataclass(frozen=True)
class FrameEvent:
    result: RenderResult
    seq: int        # render sequence number
    next_budget: int

@dataclass(frozen=True)
class TileEvent:
    x: int
    y: int
    w: int
    h: int
    seq: int
    frame_w: int
    frame_h: int

@dataclass(frozen=True)
class LogEvent:
    message: str
    level: Optional[str] = None
