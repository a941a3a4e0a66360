"""
Work executor interface.

An executor performs the domain action for a claimed group. Its side effects
are not part of the ledger transaction.
"""
import importlib
import inspect
from abc import ABC, abstractmethod
from typing import List, Union

from claim_worker.exceptions import ConfigurationError
from claim_worker.schemas import ExecutionResult, RequestKind, RequestSnapshot
from claim_worker.utils.logging import get_context_logger

logger = get_context_logger("executors")


class WorkExecutor(ABC):
    """Performs the action a claimed group stands for."""

    @abstractmethod
    def execute(
        self,
        target_id: str,
        kind: RequestKind,
        requests: List[RequestSnapshot]
    ) -> Union[ExecutionResult, bool]:
        """
        Run the work for every request in the group.

        Returning False or ExecutionResult.failure(), or raising, settles the
        group as 'error'. Raise ExecutionFailedError to record its message
        as the failure detail; any other exception is logged with its
        traceback and recorded as "Type: message".
        """


class LoggingExecutor(WorkExecutor):
    """Logs each group and reports success."""

    def execute(self, target_id, kind, requests):
        ids = [request.id for request in requests]
        logger.info(
            f"Executing {kind.value} group for target {target_id}: {ids}",
            extra={"target_id": target_id, "request_ids": ids}
        )
        return ExecutionResult.success()


def load_executor(path: str) -> WorkExecutor:
    """
    Resolve an executor from a "package.module:attribute" path.

    The attribute may be a WorkExecutor subclass, a zero-argument factory,
    or an instance.

    Raises:
        ConfigurationError: If the path cannot be resolved to an executor
    """
    module_name, sep, attr_name = (path or "").partition(":")
    if not sep or not module_name or not attr_name:
        raise ConfigurationError(
            f"Executor path must look like 'package.module:attribute', got {path!r}",
            config_key="WORK_EXECUTOR"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import executor module {module_name!r}",
            config_key="WORK_EXECUTOR",
            original_exception=e
        )

    target = getattr(module, attr_name, None)
    if target is None:
        raise ConfigurationError(
            f"Module {module_name!r} has no attribute {attr_name!r}",
            config_key="WORK_EXECUTOR"
        )

    executor = target
    if inspect.isclass(target) or (callable(target) and not hasattr(target, "execute")):
        try:
            executor = target()
        except Exception as e:
            raise ConfigurationError(
                f"Could not construct executor from {path!r}: {str(e)}",
                config_key="WORK_EXECUTOR",
                original_exception=e
            )

    if not callable(getattr(executor, "execute", None)):
        raise ConfigurationError(
            f"{path!r} did not produce an object with an execute() method",
            config_key="WORK_EXECUTOR"
        )

    logger.info(f"Loaded work executor {path}")
    return executor
