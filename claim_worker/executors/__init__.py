"""Work executors."""
from claim_worker.exceptions import ExecutionFailedError
from .base import WorkExecutor, LoggingExecutor, load_executor

__all__ = ["WorkExecutor", "LoggingExecutor", "load_executor", "ExecutionFailedError"]
