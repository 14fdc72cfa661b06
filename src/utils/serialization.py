"""JSON helpers shared by the API and the dashboard exporter."""

import math
from typing import Any

import numpy as np


def convert_to_json_serializable(obj: Any) -> Any:
    """
    Recursively convert numpy types and non-finite floats to JSON-safe values.

    NaN and infinities become ``None`` so payloads stay valid JSON.

    Args:
        obj: Object to convert

    Returns:
        JSON-serializable version of the object
    """
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, (float, np.floating)):
        value = float(obj)
        return value if math.isfinite(value) else None
    elif isinstance(obj, np.ndarray):
        return [convert_to_json_serializable(item) for item in obj.tolist()]
    elif isinstance(obj, dict):
        return {key: convert_to_json_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_to_json_serializable(item) for item in obj]
    else:
        return obj
