from .log import get_logger
from .telemetry import RuntimeEventLogger

__all__ = ["RuntimeEventLogger", "get_logger"]
