import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj)
        # Pydantic models
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json", by_alias=True)
        return super().default(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with Decimal, datetime, enum and pydantic support."""
    return json.dumps(obj, cls=EnhancedJSONEncoder, **kwargs)
