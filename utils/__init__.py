# utils/__init__.py
"""
Process-wide utilities shared by the worker and the ops API.
"""

# JSON utilities
from .json_utils import prepare_for_json

# Telemetry
from .telemetry import perf_timer

__all__ = [
    # JSON
    "prepare_for_json",

    # Telemetry
    "perf_timer",
]
