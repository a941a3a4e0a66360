"""
Distributed work claiming over a PostgreSQL request ledger.

Worker processes cooperatively drain the ledger: each request is executed by
exactly one worker at a time, in approximate id order, and a crashed worker's
claims revert to 'new' when its transaction is aborted.
"""
from .services.enqueue_service import enqueue_request
from .core.sweeper import SweepController, SweepState
from .core.wake_listener import WakeListener, publish_wakeup
from .executors.base import WorkExecutor, LoggingExecutor
from .exceptions import ExecutionFailedError
from .schemas import ExecutionResult, FailedPrimaryPolicy
from .version import __version__

__all__ = [
    # Enqueue
    "enqueue_request",

    # Worker loop
    "SweepController",
    "SweepState",
    "WakeListener",
    "publish_wakeup",

    # Executors
    "WorkExecutor",
    "LoggingExecutor",
    "ExecutionFailedError",
    "ExecutionResult",
    "FailedPrimaryPolicy",

    # Version information
    "__version__",
]
