# src/frame_monitor/utils/json_utils.py
import json
from datetime import datetime
from enum import Enum
from typing import Any

import numpy as np


class NumpyEncoder(json.JSONEncoder):
    """
    JSON encoder for run summaries and HDF5 attributes.

    Handles NumPy scalars and arrays, datetimes, enums and tuples/sets.
    """

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.bool_):
            return bool(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, (set, tuple)):
            return list(obj)
        return super().default(obj)


def json_dumps(obj: Any, **kwargs) -> str:
    """Serialize obj to a JSON string with NumPy support."""
    return json.dumps(obj, cls=NumpyEncoder, **kwargs)


def json_dump(obj: Any, fp, **kwargs) -> None:
    """Serialize obj to a JSON file object with NumPy support."""
    json.dump(obj, fp, cls=NumpyEncoder, **kwargs)
