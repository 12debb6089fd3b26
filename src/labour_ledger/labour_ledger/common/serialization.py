from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def to_jsonable(value: Any) -> Any:
    """Convert domain objects into JSON friendly primitives.

    Dates become ISO strings and decimals become strings so wage amounts keep
    their exact value on the wire.
    """

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        payload = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        extra = getattr(value, "__json_extra__", None)
        if extra:
            payload.update({name: to_jsonable(getattr(value, name)) for name in extra})
        return payload
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value
