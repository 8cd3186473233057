from .reporter import CompositeReporter, ConsoleReporter, SnapshotReporter, StatusReporter

__all__ = ["CompositeReporter", "ConsoleReporter", "SnapshotReporter", "StatusReporter"]
