"""
FILE: test/claim_worker/test_worker.py
======================================
"""

import pytest
from unittest.mock import MagicMock, patch

import psycopg2

from claim_worker.config import WorkerSettings
from claim_worker.core.sweeper import DrainStats
from claim_worker.exceptions import DatabaseError
from claim_worker.executors.base import LoggingExecutor
from claim_worker.schemas import FailedPrimaryPolicy
from claim_worker.worker import ClaimWorker, build_worker


@pytest.fixture
def controller():
    controller = MagicMock()
    controller.drain.return_value = DrainStats()
    return controller


@pytest.fixture
def listener():
    return MagicMock()


@pytest.fixture(autouse=True)
def no_signal_handlers():
    with patch("claim_worker.worker.signal.signal") as mock_signal:
        yield mock_signal


def _wakeups(worker, results):
    """wait() side effect returning `results` in turn, then stopping the worker."""
    remaining = list(results)

    def wait(timeout=None):
        if remaining:
            outcome = remaining.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        worker.stop()
        return False
    return wait


class TestClaimWorker:

    def test_run_once_drains(self, controller, listener):
        worker = ClaimWorker(controller, listener)

        assert isinstance(worker.run_once(), DrainStats)
        controller.drain.assert_called_once()
        listener.start.assert_not_called()

    def test_drains_on_each_wakeup(self, controller, listener):
        worker = ClaimWorker(controller, listener)
        listener.wait.side_effect = _wakeups(worker, [True, True])

        worker.run_forever()

        listener.start.assert_called_once()
        assert controller.drain.call_count == 2
        listener.close.assert_called_once()

    def test_timeout_without_rescan_does_not_drain(self, controller, listener):
        worker = ClaimWorker(controller, listener)
        listener.wait.side_effect = _wakeups(worker, [False])

        worker.run_forever()

        controller.drain.assert_not_called()

    def test_rescan_interval_drains_on_timeout(self, controller, listener):
        worker = ClaimWorker(controller, listener, rescan_interval_seconds=30)
        listener.wait.side_effect = _wakeups(worker, [False])

        worker.run_forever()

        controller.drain.assert_called_once()
        assert listener.wait.call_args_list[0].kwargs["timeout"] == 30

    def test_database_error_backs_off_and_retriggers(self, controller, listener):
        worker = ClaimWorker(controller, listener, error_backoff_seconds=0)
        controller.drain.side_effect = [DatabaseError("down"), DrainStats()]
        listener.wait.side_effect = _wakeups(worker, [True, True])

        worker.run_forever()

        listener.trigger.assert_called_once()
        assert controller.drain.call_count == 2

    def test_listener_failure_resubscribes(self, controller, listener):
        worker = ClaimWorker(controller, listener, error_backoff_seconds=0)
        listener.wait.side_effect = _wakeups(worker, [psycopg2.OperationalError("gone"), True])

        worker.run_forever()

        assert listener.start.call_count == 2
        controller.drain.assert_called_once()

    def test_stop_propagates(self, controller, listener):
        worker = ClaimWorker(controller, listener)
        worker.stop()

        controller.request_stop.assert_called_once()
        listener.stop.assert_called_once()

    def test_signal_handlers_installed(self, controller, listener, no_signal_handlers):
        worker = ClaimWorker(controller, listener)
        listener.wait.side_effect = _wakeups(worker, [])

        worker.run_forever()

        assert no_signal_handlers.call_count == 2


class TestBuildWorker:

    def test_wires_settings(self):
        settings = WorkerSettings(
            wake_channel="custom_channel",
            wake_poll_interval_seconds=0.5,
            error_backoff_seconds=1,
            rescan_interval_seconds=10,
            failed_primary_policy=FailedPrimaryPolicy.WAIT
        )

        worker = build_worker(settings)

        assert isinstance(worker.controller.executor, LoggingExecutor)
        assert worker.controller.failed_primary_policy == FailedPrimaryPolicy.WAIT
        assert worker.listener.channel == "custom_channel"
        assert worker.listener.poll_interval == 0.5
        assert worker.error_backoff_seconds == 1
        assert worker.rescan_interval_seconds == 10

    def test_explicit_executor_wins(self):
        executor = MagicMock()
        worker = build_worker(WorkerSettings(work_executor="ignored.module:X"), executor=executor)

        assert worker.controller.executor is executor
