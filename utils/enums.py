from enum import Enum, auto

class BackendType(Enum):
    AUTO = auto()
    CPU = auto()
    PYTHON = auto()

class ColoringMode(Enum):
    LOG_RATIO = auto()
    GRADIENT = auto()

class EngineMode(Enum):
    FULL_FRAME = auto()
    TILED = auto()

class RenderState(Enum):
    IDLE = auto()
    RENDERING = auto()

class PendingInputPolicy(Enum):
    DISCARD = auto()
    COALESCE = auto()
