"""
Conversion between Python values and Data API fields

Outgoing parameters are built as TaggedValue instances, each carrying
exactly one populated variant. Incoming record fields are decoded straight
to Python values by ``decode_field``.
"""

import datetime
import decimal
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy_dataapi.exceptions import DataError, ProgrammingError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

TYPE_HINTS = frozenset({"TIMESTAMP", "DATE", "TIME", "DECIMAL", "UUID", "JSON"})

Parameters = Union[Sequence[Any], Mapping[str, Any], None]


@dataclass(frozen=True)
class TaggedValue:
    """
    A single Data API field.

    Exactly one of ``is_null``, ``blob``, ``boolean``, ``double``, ``long``
    or ``string`` is populated. ``type_hint`` may only accompany ``string``.
    """

    is_null: bool = False
    blob: Optional[bytes] = None
    boolean: Optional[bool] = None
    double: Optional[float] = None
    long: Optional[int] = None
    string: Optional[str] = None
    type_hint: Optional[str] = None

    def __post_init__(self):
        populated = int(self.is_null) + sum(
            v is not None
            for v in (self.blob, self.boolean, self.double, self.long, self.string)
        )
        if populated != 1:
            raise ProgrammingError(
                f"TaggedValue needs exactly one populated variant, got {populated}"
            )
        if self.type_hint is not None:
            if self.string is None:
                raise ProgrammingError("type_hint is only valid on string values")
            if self.type_hint not in TYPE_HINTS:
                raise ProgrammingError(f"Unknown type hint '{self.type_hint}'")

    def to_field(self) -> Dict[str, Any]:
        """Render as the service's Field structure."""
        if self.is_null:
            return {"isNull": True}
        if self.blob is not None:
            return {"blobValue": self.blob}
        if self.boolean is not None:
            return {"booleanValue": self.boolean}
        if self.double is not None:
            return {"doubleValue": self.double}
        if self.long is not None:
            return {"longValue": self.long}
        return {"stringValue": self.string}


def null() -> TaggedValue:
    return TaggedValue(is_null=True)


def blob(value: Union[bytes, bytearray, memoryview]) -> TaggedValue:
    return TaggedValue(blob=bytes(value))


def boolean(value: bool) -> TaggedValue:
    return TaggedValue(boolean=bool(value))


def double(value: float) -> TaggedValue:
    return TaggedValue(double=float(value))


def long(value: int) -> TaggedValue:
    if not INT64_MIN <= value <= INT64_MAX:
        raise DataError(f"Integer {value} does not fit in a signed 64-bit value")
    return TaggedValue(long=int(value))


def string(value: str, type_hint: Optional[str] = None) -> TaggedValue:
    return TaggedValue(string=value, type_hint=type_hint)


def _trim_millis(microsecond: int) -> str:
    # Truncate to milliseconds, drop trailing zeros, drop the dot if nothing is left.
    millis = microsecond // 1000
    if not millis:
        return ""
    return f".{millis:03d}".rstrip("0")


def format_timestamp(value: datetime.datetime) -> str:
    """Format as YYYY-MM-DD HH:MM:SS[.fff], ignoring any timezone."""
    # strftime does not zero-pad years below 1000 on every platform
    day = f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    return f"{day} {value:%H:%M:%S}{_trim_millis(value.microsecond)}"


def format_time(value: datetime.time) -> str:
    return value.strftime("%H:%M:%S") + _trim_millis(value.microsecond)


def timestamp(value: datetime.datetime) -> TaggedValue:
    return string(format_timestamp(value), type_hint="TIMESTAMP")


def _with_fraction(parsed, fraction: str):
    if fraction:
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed


def parse_timestamp(value: str) -> datetime.datetime:
    """Parse the service's YYYY-MM-DD HH:MM:SS[.f...] text."""
    base, _, fraction = value.partition(".")
    return _with_fraction(datetime.datetime.strptime(base, "%Y-%m-%d %H:%M:%S"), fraction)


def parse_time(value: str) -> datetime.time:
    base, _, fraction = value.partition(".")
    return _with_fraction(datetime.datetime.strptime(base, "%H:%M:%S").time(), fraction)


def marshal(value: Any) -> TaggedValue:
    """
    Convert a Python value into a TaggedValue.

    Raises:
        ProgrammingError: for types the Data API has no field for
        DataError: for integers outside the signed 64-bit range
    """
    if isinstance(value, TaggedValue):
        return value
    if value is None:
        return null()
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return boolean(value)
    if isinstance(value, int):
        return long(value)
    if isinstance(value, float):
        return double(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return blob(value)
    if isinstance(value, str):
        return string(value)
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime.datetime):
        return timestamp(value)
    if isinstance(value, datetime.date):
        return string(value.isoformat(), type_hint="DATE")
    if isinstance(value, datetime.time):
        return string(format_time(value), type_hint="TIME")
    if isinstance(value, decimal.Decimal):
        return string(str(value), type_hint="DECIMAL")
    if isinstance(value, uuid.UUID):
        return string(str(value), type_hint="UUID")
    raise ProgrammingError(
        f"Unsupported parameter type {type(value).__name__}: {value!r}"
    )


def _sql_parameter(name: str, value: Any) -> Dict[str, Any]:
    try:
        tagged = marshal(value)
    except (DataError, ProgrammingError) as e:
        raise type(e)(f"Parameter '{name}': {e}") from e
    param = {"name": name, "value": tagged.to_field()}
    if tagged.type_hint:
        param["typeHint"] = tagged.type_hint
    return param


def build_parameters(params: Parameters) -> List[Dict[str, Any]]:
    """
    Build the SqlParameter list for a statement.

    Positional values are named by their 1-based index, so the SQL refers
    to them as :1, :2, ... Mappings keep their own names.
    """
    if params is None:
        return []
    if isinstance(params, Mapping):
        return [_sql_parameter(str(name), value) for name, value in params.items()]
    if isinstance(params, (str, bytes)):
        raise ProgrammingError("Parameters must be a sequence or a mapping, not a string")
    return [_sql_parameter(str(n), value) for n, value in enumerate(params, start=1)]


def decode_field(field: Mapping[str, Any]) -> Any:
    """
    Decode a record field into a Python value.

    Variants are checked in a fixed order so a malformed field with several
    members still decodes deterministically.
    """
    if field.get("isNull"):
        return None
    if "blobValue" in field:
        return field["blobValue"]
    if "booleanValue" in field:
        return field["booleanValue"]
    if "doubleValue" in field:
        return field["doubleValue"]
    if "longValue" in field:
        return field["longValue"]
    if "stringValue" in field:
        return field["stringValue"]
    if "arrayValue" in field:
        return decode_array(field["arrayValue"])
    return None


def decode_array(array: Mapping[str, Any]) -> List[Any]:
    for key in ("booleanValues", "longValues", "doubleValues", "stringValues"):
        if key in array:
            return list(array[key])
    if "arrayValues" in array:
        return [decode_array(inner) for inner in array["arrayValues"]]
    return []
