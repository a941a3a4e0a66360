#utils/telemetry.py

import logging, time
from typing import Any, Dict, Optional

logger = logging.getLogger("telemetry")

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}

def _now_ms() -> int:
    return int(time.time() * 1000)

def _emit(kind: str, name: str, data: Dict[str, Any], level: str = "info"):
    payload = {"ts_ms": _now_ms(), "trace_id": data.get("trace_id"), "kind": kind, "name": name, "level": level, **data}
    logger.log(_LEVELS.get(level, 20), f"{kind} {name}", extra={"event": payload})

class perf_timer:
    """Emit start/end events around a block; the end event carries latency_ms."""
    def __init__(self, kind: str, name: str, data: Dict[str, Any] | None = None, level: str = "info"):
        self.kind, self.name, self.data, self.level = kind, name, data or {}, level
        self.latency_ms: Optional[int] = None
    def __enter__(self):
        self.t0 = time.perf_counter()
        _emit(self.kind, f"{self.name}:start", {**self.data}, level="debug")
        return self
    def __exit__(self, exc_type, exc, tb):
        self.latency_ms = int((time.perf_counter() - self.t0) * 1000)
        extra = {"latency_ms": self.latency_ms}
        if exc is not None:
            extra["error"] = repr(exc)
            _lvl = "error"
        else:
            _lvl = self.level
        _emit(self.kind, f"{self.name}:end", {**self.data, **extra}, level=_lvl)
