from .app import App, run_main
from .shutdown import TerminationGuard
from .supervisor import LoopSupervisor

__all__ = ["App", "LoopSupervisor", "TerminationGuard", "run_main"]
