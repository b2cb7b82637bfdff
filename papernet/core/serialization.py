"""Canonical JSON bytes for values that are signed or stored.

Endorsers verify a proposal signature over these bytes and the in-memory
contract stores paper records in this form, so the encoding must not
depend on dict insertion order, Decimal exponent or timezone spelling.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime


def _plain(obj: object) -> Any:  # noqa: PLR0911
    match obj:
        case None | bool() | int() | str():
            return obj
        case bytes():
            return obj.hex()
        case Decimal():
            return "0" if obj.is_zero() else str(obj.normalize())
        case UtcDatetime(value=ts):
            return ts.isoformat()
        case datetime() if obj.tzinfo is None:
            raise TypeError("naive datetime (wrap it in UtcDatetime)")
        case date():
            # datetime is a date subclass; both render as ISO-8601
            return obj.isoformat()
        case Enum():
            return obj.value
        case tuple() | list():
            return [_plain(item) for item in obj]
        case dict():
            return {str(k): _plain(v) for k, v in obj.items()}
        case _ if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: _plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        case _:
            raise TypeError(type(obj).__name__)


def canonical_bytes(obj: object) -> Ok[bytes] | Err[str]:
    """Compact JSON with sorted keys; Err names the first unsupported value."""
    try:
        plain = _plain(obj)
    except TypeError as e:
        return Err(f"Unsupported type in canonical serialization: {e}")
    return Ok(json.dumps(plain, sort_keys=True, separators=(",", ":")).encode("utf-8"))
