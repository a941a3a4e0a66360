"""
FILE: test/claim_worker/test_config.py
======================================
"""

import pytest

from claim_worker.config import WorkerSettings, validate_channel_name, DEFAULT_WAKE_CHANNEL
from claim_worker.exceptions import ConfigurationError, ErrorCode
from claim_worker.schemas import FailedPrimaryPolicy


# ============================================================================
# TEST: WorkerSettings.from_env
# ============================================================================

class TestWorkerSettingsFromEnv:
    """Environment parsing and validation"""

    def test_defaults(self):
        settings = WorkerSettings.from_env({})

        assert settings.wake_channel == DEFAULT_WAKE_CHANNEL
        assert settings.wake_poll_interval_seconds == 1.0
        assert settings.error_backoff_seconds == 5.0
        assert settings.rescan_interval_seconds == 0.0
        assert settings.failed_primary_policy == FailedPrimaryPolicy.ERROR
        assert settings.work_executor is None

    def test_values_parsed(self):
        settings = WorkerSettings.from_env({
            "WAKE_CHANNEL": "ledger_events",
            "WAKE_POLL_INTERVAL_SECONDS": "0.25",
            "ERROR_BACKOFF_SECONDS": "2",
            "RESCAN_INTERVAL_SECONDS": "30",
            "FAILED_PRIMARY_POLICY": "WAIT",
            "WORK_EXECUTOR": "myapp.executors:SheetExecutor",
        })

        assert settings.wake_channel == "ledger_events"
        assert settings.wake_poll_interval_seconds == 0.25
        assert settings.error_backoff_seconds == 2.0
        assert settings.rescan_interval_seconds == 30.0
        assert settings.failed_primary_policy == FailedPrimaryPolicy.WAIT
        assert settings.work_executor == "myapp.executors:SheetExecutor"

    def test_blank_values_use_defaults(self):
        settings = WorkerSettings.from_env({"WAKE_CHANNEL": "  ", "WORK_EXECUTOR": ""})

        assert settings.wake_channel == DEFAULT_WAKE_CHANNEL
        assert settings.work_executor is None

    def test_invalid_number_names_variable(self):
        with pytest.raises(ConfigurationError) as exc:
            WorkerSettings.from_env({"ERROR_BACKOFF_SECONDS": "soon"})

        assert exc.value.error_code == ErrorCode.CONFIGURATION_ERROR
        assert exc.value.details["config_key"] == "ERROR_BACKOFF_SECONDS"

    def test_non_positive_poll_interval_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            WorkerSettings.from_env({"WAKE_POLL_INTERVAL_SECONDS": "0"})

        assert exc.value.details["config_key"] == "WAKE_POLL_INTERVAL_SECONDS"

    def test_unknown_policy_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            WorkerSettings.from_env({"FAILED_PRIMARY_POLICY": "retry"})

        assert exc.value.details["config_key"] == "FAILED_PRIMARY_POLICY"

    def test_invalid_channel_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            WorkerSettings.from_env({"WAKE_CHANNEL": "bad-channel; DROP"})

        assert exc.value.details["config_key"] == "WAKE_CHANNEL"


# ============================================================================
# TEST: validate_channel_name
# ============================================================================

class TestValidateChannelName:
    """Channel names are interpolated into LISTEN, so they must be identifiers"""

    @pytest.mark.parametrize("channel", ["request_ledger_wakeup", "_x", "A1"])
    def test_valid(self, channel):
        assert validate_channel_name(channel) == channel

    @pytest.mark.parametrize("channel", ["", "1abc", "has space", 'quo"te', "x" * 64, None])
    def test_invalid(self, channel):
        with pytest.raises(ConfigurationError):
            validate_channel_name(channel)
