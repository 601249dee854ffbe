"""JSON helpers that understand the types found in credential and subscriber records."""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Union
from uuid import UUID


class RecordJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, UUID):
            return str(obj)
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj)
        # Pydantic models (credential/subscriber schemas, assignment results)
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        return super().default(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with datetime, enum and pydantic support."""
    return json.dumps(obj, cls=RecordJSONEncoder, **kwargs)


def loads(s: Union[str, bytes, bytearray], **kwargs) -> Any:
    """Standard JSON loads function."""
    return json.loads(s, **kwargs)
