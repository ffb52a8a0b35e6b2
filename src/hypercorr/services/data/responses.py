"""
JSON response class that tolerates non-finite floats.

Upstream prices occasionally parse to NaN / inf; the stdlib encoder
rejects those with ``allow_nan=False``, so they are replaced by ``null``.
"""

import json
import math
from typing import Any

from fastapi.responses import JSONResponse


def _sanitize(obj: Any) -> Any:
    """Recursively replace non-finite floats with None."""
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    return obj


class SafeJSONResponse(JSONResponse):
    """JSONResponse subclass that handles inf/NaN floats gracefully."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            _sanitize(content),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
