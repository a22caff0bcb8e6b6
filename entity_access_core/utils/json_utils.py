import json
from datetime import date, datetime
from typing import Any


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        # Handle Pydantic models and other objects with model_dump method
        elif hasattr(obj, "model_dump"):
            return obj.model_dump()
        return str(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with datetime and pydantic support; unknown objects become strings."""
    return json.dumps(obj, cls=EnhancedJSONEncoder, **kwargs)


def canonical_dumps(obj: Any) -> str:
    """Deterministic JSON: sorted keys, compact separators, non-ASCII kept as-is."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
