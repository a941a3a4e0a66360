# utils/json_utils.py
import uuid
from datetime import datetime, date
from typing import Any


def prepare_for_json(obj: Any) -> Any:
    """
    Prepare an object for JSON serialization by handling special types.

    Args:
        obj: The object to prepare

    Returns:
        JSON-serializable version of the object
    """
    if obj is None:
        return None

    # Handle basic types directly
    if isinstance(obj, (str, int, float, bool)):
        return obj

    # Handle UUIDs
    if isinstance(obj, uuid.UUID):
        return str(obj)

    # Handle datetime/date objects
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    # Handle enums backed by str
    if hasattr(obj, "value") and isinstance(getattr(obj, "value"), (str, int)):
        return obj.value

    if isinstance(obj, dict):
        return {k: prepare_for_json(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [prepare_for_json(item) for item in obj]

    # For all other objects, try string conversion
    try:
        return str(obj)
    except Exception:
        return None
