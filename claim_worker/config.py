"""
Worker configuration.

Values come from the environment (a .env file is loaded by the entry points)
and are validated once at startup.
"""
import os
import re
from typing import Optional, Mapping

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from claim_worker.exceptions import ConfigurationError
from claim_worker.schemas import FailedPrimaryPolicy

DEFAULT_WAKE_CHANNEL = "request_ledger_wakeup"
WAKE_CHANNEL = os.environ.get("WAKE_CHANNEL", DEFAULT_WAKE_CHANNEL)

# PostgreSQL identifiers are limited to 63 bytes
CHANNEL_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def validate_channel_name(channel: str) -> str:
    """Return the channel name if it is usable with LISTEN/NOTIFY."""
    if not isinstance(channel, str) or not CHANNEL_NAME_PATTERN.match(channel):
        raise ConfigurationError(
            f"Invalid wakeup channel name: {channel!r}",
            config_key="WAKE_CHANNEL"
        )
    return channel


class WorkerSettings(BaseModel):
    """Validated settings for one worker process."""
    wake_channel: str = DEFAULT_WAKE_CHANNEL
    wake_poll_interval_seconds: float = Field(1.0, gt=0)
    error_backoff_seconds: float = Field(5.0, ge=0)
    rescan_interval_seconds: float = Field(0.0, ge=0)
    failed_primary_policy: FailedPrimaryPolicy = FailedPrimaryPolicy.ERROR
    work_executor: Optional[str] = None

    @field_validator("wake_channel")
    @classmethod
    def check_channel(cls, v):
        if not CHANNEL_NAME_PATTERN.match(v):
            raise ValueError("must be a SQL identifier of at most 63 characters")
        return v

    @field_validator("failed_primary_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("work_executor")
    @classmethod
    def blank_executor_is_default(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WorkerSettings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If any value is missing its expected shape
        """
        env = os.environ if environ is None else environ
        mapping = {
            "wake_channel": "WAKE_CHANNEL",
            "wake_poll_interval_seconds": "WAKE_POLL_INTERVAL_SECONDS",
            "error_backoff_seconds": "ERROR_BACKOFF_SECONDS",
            "rescan_interval_seconds": "RESCAN_INTERVAL_SECONDS",
            "failed_primary_policy": "FAILED_PRIMARY_POLICY",
            "work_executor": "WORK_EXECUTOR",
        }
        values = {
            field: env[key].strip()
            for field, key in mapping.items()
            if env.get(key) is not None and env.get(key).strip() != ""
        }
        try:
            return cls(**values)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else None
            raise ConfigurationError(
                f"Invalid worker configuration: {first.get('msg')}",
                config_key=mapping.get(field, field),
                original_exception=e
            )
