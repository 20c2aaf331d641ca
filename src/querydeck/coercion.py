"""Conversion of engine-specific cell values into generic values.

Drivers hand back whatever Python type they map a column to, and the
physical column type cannot be known up front for every engine. Each cell
is therefore offered to an ordered list of typed decoders; the first one
that accepts the value produces the result. A decoder returns ``SKIP`` when
the value is not of its type.

``None`` is accepted by the first decoder in the list, so a null cell is
always the null generic value whatever the column's declared type.
"""

import datetime
import functools
import ipaddress
import json
import math
import numbers
import uuid
from decimal import Decimal
from typing import Any, Callable, Sequence

from .constants import BLOB_SENTINEL, DATE_FORMAT, DATETIME_FORMAT, TIME_FORMAT
from .models import GenericValue, QueryResult

SKIP = object()

INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1
INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1

# Objects whose str() is their canonical text form
TEXTUAL_TYPES = (
    str,
    Decimal,
    int,
    uuid.UUID,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)

Decoder = Callable[[Any], Any]


def _accepts(*types: type, exclude: tuple = ()):
    """Wrap a decoder so it claims ``None`` and skips values of other types."""

    def wrap(fn):
        @functools.wraps(fn)
        def decode(value):
            if value is None:
                return None
            if not isinstance(value, types) or isinstance(value, exclude):
                return SKIP
            return fn(value)

        return decode

    return wrap


@_accepts(int, exclude=(bool,))
def decode_int64(value: int) -> GenericValue:
    if INT64_MIN <= value <= INT64_MAX:
        return int(value)
    return SKIP


@_accepts(int, exclude=(bool,))
def decode_int32(value: int) -> GenericValue:
    if INT32_MIN <= value <= INT32_MAX:
        return int(value)
    return SKIP


@_accepts(float)
def decode_float64(value: float) -> GenericValue:
    if math.isfinite(value):
        return float(value)
    return SKIP


@_accepts(numbers.Real, exclude=(bool, numbers.Integral, float, Decimal))
def decode_float32(value: numbers.Real) -> GenericValue:
    number = float(value)
    if math.isfinite(number):
        return number
    return SKIP


@_accepts(bool)
def decode_bool(value: bool) -> GenericValue:
    return bool(value)


@_accepts(datetime.datetime)
def decode_datetime_tz(value: datetime.datetime) -> GenericValue:
    if value.tzinfo is None or value.utcoffset() is None:
        return SKIP
    return value.isoformat()


@_accepts(datetime.datetime)
def decode_datetime(value: datetime.datetime) -> GenericValue:
    return value.strftime(DATETIME_FORMAT)


@_accepts(datetime.date, exclude=(datetime.datetime,))
def decode_date(value: datetime.date) -> GenericValue:
    return value.strftime(DATE_FORMAT)


@_accepts(datetime.time, datetime.timedelta)
def decode_time(value) -> GenericValue:
    if isinstance(value, datetime.timedelta):
        # MySQL TIME columns arrive as durations
        total = int(value.total_seconds())
        sign = "-" if total < 0 else ""
        hours, remainder = divmod(abs(total), 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    return value.strftime(TIME_FORMAT)


def _json_native(value):
    """Rebuild a container with every leaf passed through ``coerce_value``."""
    if isinstance(value, dict):
        return {str(key): _json_native(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    if isinstance(value, (list, tuple)):
        return [_json_native(item) for item in value]
    return coerce_value(value)


@_accepts(dict, list, tuple, set, frozenset)
def decode_json(value) -> GenericValue:
    return json.dumps(_json_native(value), separators=(",", ":"))


@_accepts(*TEXTUAL_TYPES, exclude=(bool,))
def decode_string(value) -> GenericValue:
    return str(value)


@_accepts(bytes, bytearray, memoryview)
def decode_binary(value) -> GenericValue:
    try:
        return bytes(value).decode("utf-8")
    except UnicodeDecodeError:
        return BLOB_SENTINEL


DECODERS: tuple[tuple[str, Decoder], ...] = (
    ("int64", decode_int64),
    ("int32", decode_int32),
    ("float64", decode_float64),
    ("float32", decode_float32),
    ("bool", decode_bool),
    ("datetime_tz", decode_datetime_tz),
    ("datetime", decode_datetime),
    ("date", decode_date),
    ("time", decode_time),
    ("json", decode_json),
    ("string", decode_string),
    ("binary", decode_binary),
)


def coerce_value(value: Any, decoders: Sequence[tuple[str, Decoder]] = DECODERS) -> GenericValue:
    """Convert one raw cell value into a generic value.

    Never raises: a value no decoder accepts becomes ``None``.
    """
    for _tag, decode in decoders:
        result = decode(value)
        if result is not SKIP:
            return result
    return None


def coerce_cell(row: Sequence[Any], index: int) -> GenericValue:
    """Convert the cell at ``index`` of a driver row into a generic value."""
    try:
        value = row[index]
    except (IndexError, KeyError, TypeError):
        return None
    return coerce_value(value)


def coerce_row(row: Sequence[Any], width: int) -> tuple[GenericValue, ...]:
    """Convert the first ``width`` cells of a driver row."""
    return tuple(coerce_cell(row, index) for index in range(width))


def build_result(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> QueryResult:
    """Materialize driver rows into a QueryResult.

    A result with no rows has no columns either, whatever metadata the
    driver reported.
    """
    if not rows:
        return QueryResult.empty()
    width = len(columns)
    return QueryResult.from_rows(columns, [coerce_row(row, width) for row in rows])
