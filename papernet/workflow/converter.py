"""Temporal DataConverter for the paper transaction activity and workflow.

PaperTransactionInput / PaperTransactionOutput carry Decimal face values,
dates, enums, optional nested dataclasses and string tuples, none of which
plain JSON round-trips. Encoding tags each dataclass with ``__type__``
(and Decimal/date with their own markers); decoding rebuilds the
dataclass field by field from its type hints.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
import types
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Union, get_args, get_origin, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

_TYPE = "__type__"
_DECIMAL = "__decimal__"
_DATE = "__date__"

# Payload classes are only ever looked up in these modules.
_ALLOWED_MODULES: frozenset[str] = frozenset({
    "papernet.instrument.paper",
    "papernet.instrument.requests",
    "papernet.workflow.types",
})

_CLASS_CACHE: dict[str, type] = {}


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _tagged(obj: Any) -> Any:
    match obj:
        case None | bool() | int() | float() | str():
            return obj
        case Decimal():
            return {_DECIMAL: str(obj)}
        case date():
            return {_DATE: obj.isoformat()}
        case Enum():
            return obj.value
        case tuple() | list():
            return [_tagged(item) for item in obj]
        case dict():
            return {str(k): _tagged(v) for k, v in obj.items()}
        case _ if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            cls = type(obj)
            return {
                _TYPE: f"{cls.__module__}.{cls.__qualname__}",
                **{f.name: _tagged(getattr(obj, f.name)) for f in dataclasses.fields(obj)},
            }
        case _:
            return str(obj)


class PapernetJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        encoded = _tagged(o)
        if encoded is o:
            return super().default(o)
        return encoded


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _payload_class(fqn: str) -> type:
    """Dataclass named by a ``__type__`` tag; TypeError outside the allowed modules."""
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    module_name, _, class_name = fqn.rpartition(".")
    cls = None
    if module_name in _ALLOWED_MODULES:
        cls = getattr(importlib.import_module(module_name), class_name, None)
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"Refusing to decode payload type {fqn!r}")
    _CLASS_CACHE[fqn] = cls
    return cls


def _non_optional(hint: Any) -> Any:
    if get_origin(hint) in (Union, types.UnionType):
        members = [a for a in get_args(hint) if a is not type(None)]
        if len(members) == 1:
            return members[0]
    return hint


def _untagged(hint: Any, value: Any) -> Any:
    if value is None:
        return None
    hint = _non_optional(hint)
    match value:
        case {"__type__": str(fqn)}:
            cls = _payload_class(fqn)
            hints = get_type_hints(cls)
            return cls(**{
                f.name: _untagged(hints.get(f.name, Any), value[f.name])
                for f in dataclasses.fields(cls)
                if f.name in value
            })
        case {"__decimal__": str(raw)}:
            return Decimal(raw)
        case {"__date__": str(raw)}:
            return date.fromisoformat(raw)
        case list():
            item_hint = next(iter(get_args(hint)), Any)
            return tuple(_untagged(item_hint, item) for item in value)
        case _ if isinstance(hint, type) and issubclass(hint, Enum):
            return hint(value)
        case _:
            return value


class PapernetJSONTypeConverter(JSONTypeConverter):
    """Hands tagged JSON objects to _untagged; everything else stays with Temporal."""

    def to_typed_value(self, hint: type, value: Any) -> Any:
        if isinstance(value, dict) and (_TYPE in value or _DECIMAL in value or _DATE in value):
            return _untagged(hint, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class PapernetPayloadConverter(CompositePayloadConverter):
    """Temporal's default converters with the JSON one swapped for ours."""

    def __init__(self) -> None:
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            JSONPlainPayloadConverter(
                encoder=PapernetJSONEncoder,
                custom_type_converters=[PapernetJSONTypeConverter()],
            ),
        )


PAPERNET_DATA_CONVERTER = DataConverter(
    payload_converter_class=PapernetPayloadConverter,
)
