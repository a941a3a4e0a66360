"""
FILE: test/claim_worker/test_executors.py
=========================================
"""

import sys
import types

import pytest

from claim_worker.executors.base import WorkExecutor, LoggingExecutor, load_executor
from claim_worker.exceptions import ConfigurationError
from claim_worker.schemas import ExecutionResult, RequestKind, RequestSnapshot


class RecordingExecutor(WorkExecutor):
    def __init__(self):
        self.calls = []

    def execute(self, target_id, kind, requests):
        self.calls.append((target_id, kind, [r.id for r in requests]))
        return True


@pytest.fixture
def executor_module():
    """Register a throwaway module exposing several executor shapes."""
    module = types.ModuleType("fake_executors")
    module.RecordingExecutor = RecordingExecutor
    module.instance = RecordingExecutor()
    module.make_executor = lambda: RecordingExecutor()
    module.not_an_executor = 42
    sys.modules["fake_executors"] = module
    yield module
    del sys.modules["fake_executors"]


class TestLoggingExecutor:

    def test_succeeds(self):
        requests = [RequestSnapshot(id=1, kind=RequestKind.DEPENDENT, target_id="t-1")]
        result = LoggingExecutor().execute("t-1", RequestKind.DEPENDENT, requests)

        assert isinstance(result, ExecutionResult)
        assert result.succeeded is True


class TestLoadExecutor:

    def test_loads_class(self, executor_module):
        assert isinstance(load_executor("fake_executors:RecordingExecutor"), RecordingExecutor)

    def test_loads_instance(self, executor_module):
        assert load_executor("fake_executors:instance") is executor_module.instance

    def test_loads_factory(self, executor_module):
        assert isinstance(load_executor("fake_executors:make_executor"), RecordingExecutor)

    def test_loads_builtin_default(self):
        assert isinstance(load_executor("claim_worker.executors.base:LoggingExecutor"), LoggingExecutor)

    @pytest.mark.parametrize("path", ["", "no_colon", ":attr", "module:"])
    def test_malformed_path(self, path):
        with pytest.raises(ConfigurationError) as exc:
            load_executor(path)
        assert exc.value.details["config_key"] == "WORK_EXECUTOR"

    def test_missing_module(self):
        with pytest.raises(ConfigurationError):
            load_executor("definitely_not_a_module_xyz:Executor")

    def test_missing_attribute(self, executor_module):
        with pytest.raises(ConfigurationError):
            load_executor("fake_executors:Nope")

    def test_object_without_execute(self, executor_module):
        with pytest.raises(ConfigurationError):
            load_executor("fake_executors:not_an_executor")
