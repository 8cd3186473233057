from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any


class RuntimeEventLogger:
    """Append-only structured event log of relay cycles and submissions.

    Observability only: nothing reads it back, and callers never pass
    secret material into it.
    """

    def __init__(self, data_dir: str, filename: str = "runtime_events.jsonl", *, enabled: bool = True):
        self.enabled = enabled
        self.path = Path(data_dir) / filename
        if enabled:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def emit(self, event: str, **fields: Any) -> None:
        if not self.enabled:
            return
        payload = {
            "ts": time.time(),
            "event": event,
            **fields,
        }
        row = json.dumps(payload, separators=(",", ":"), ensure_ascii=True, default=str)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(row + "\n")
