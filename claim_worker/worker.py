"""
Worker process wiring.

A ClaimWorker blocks on the wake listener while idle and drains the backlog
through its SweepController whenever a wakeup arrives.
"""
import signal
import threading
from typing import Optional

import psycopg2

from claim_worker.config import WorkerSettings
from claim_worker.core.sweeper import SweepController, DrainStats
from claim_worker.core.wake_listener import WakeListener
from claim_worker.exceptions import DatabaseError
from claim_worker.executors.base import WorkExecutor, LoggingExecutor, load_executor
from claim_worker.utils.logging import get_context_logger, with_context

logger = get_context_logger("worker")


class ClaimWorker:
    """Long-running worker: wait for a wakeup, drain, repeat."""

    def __init__(
        self,
        controller: SweepController,
        listener: WakeListener,
        error_backoff_seconds: float = 5.0,
        rescan_interval_seconds: float = 0.0,
        worker_id: Optional[str] = None
    ):
        self.controller = controller
        self.listener = listener
        self.error_backoff_seconds = error_backoff_seconds
        self.rescan_interval_seconds = rescan_interval_seconds
        self.worker_id = worker_id
        self._stopping = threading.Event()
        self.logger = with_context(logger, worker_id=worker_id) if worker_id else logger

    def stop(self, *_args) -> None:
        """Stop after the claim attempt in flight, if any."""
        if not self._stopping.is_set():
            self.logger.info("Stop requested")
        self._stopping.set()
        self.controller.request_stop()
        self.listener.stop()

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        signal.signal(signal.SIGINT, self.stop)
        signal.signal(signal.SIGTERM, self.stop)

    def run_once(self) -> DrainStats:
        """Drain the backlog once without listening for wakeups."""
        return self.controller.drain()

    def _drain(self) -> None:
        try:
            self.controller.drain()
        except DatabaseError as e:
            self.logger.error(
                f"Sweep aborted by database error: {e.message}; retrying in "
                f"{self.error_backoff_seconds}s"
            )
            self._stopping.wait(self.error_backoff_seconds)
            self.listener.trigger()

    def _restart_listener(self, error: Exception) -> None:
        self.logger.error(f"Wake listener connection failed: {str(error)}")
        self.listener.close()
        while not self._stopping.is_set():
            self._stopping.wait(self.error_backoff_seconds)
            if self._stopping.is_set():
                return
            try:
                # start() primes a wakeup, so rows enqueued while deaf are found
                self.listener.start()
                return
            except psycopg2.Error as e:
                self.logger.error(f"Could not re-subscribe to wakeups: {str(e)}")

    def run_forever(self) -> None:
        """Serve wakeups until stop() is called or a signal arrives."""
        self._stopping.clear()
        self.controller.reset_stop()
        self._install_signal_handlers()
        self.listener.start()
        self.logger.info("Claim worker started")

        timeout = self.rescan_interval_seconds or None
        try:
            while not self._stopping.is_set():
                try:
                    woke = self.listener.wait(timeout=timeout)
                except psycopg2.Error as e:
                    self._restart_listener(e)
                    continue

                if self._stopping.is_set():
                    break
                if not woke and timeout is None:
                    continue
                self._drain()
        finally:
            self.listener.close()
            self.logger.info("Claim worker stopped")


def build_worker(
    settings: Optional[WorkerSettings] = None,
    executor: Optional[WorkExecutor] = None,
    worker_id: Optional[str] = None
) -> ClaimWorker:
    """Wire a ClaimWorker against the configured database."""
    from db.db import engine, SessionLocal

    settings = settings or WorkerSettings.from_env()
    if executor is None:
        executor = load_executor(settings.work_executor) if settings.work_executor else LoggingExecutor()

    controller = SweepController(
        session_factory=SessionLocal,
        executor=executor,
        failed_primary_policy=settings.failed_primary_policy
    )
    listener = WakeListener(
        connection_factory=engine.raw_connection,
        channel=settings.wake_channel,
        poll_interval=settings.wake_poll_interval_seconds
    )
    return ClaimWorker(
        controller,
        listener,
        error_backoff_seconds=settings.error_backoff_seconds,
        rescan_interval_seconds=settings.rescan_interval_seconds,
        worker_id=worker_id
    )
