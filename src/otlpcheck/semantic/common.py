"""Helpers shared by the semantic checkers."""

import re
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from ..config import DEFAULT_CLOCK_SKEW_GRACE_SECONDS

ZERO_TRACE_ID = "0" * 32
ZERO_SPAN_ID = "0" * 16

_DECIMAL = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class SemanticContext:
    """Inputs to semantic checks that do not come from the payload."""

    clock_skew_grace_ns: int = DEFAULT_CLOCK_SKEW_GRACE_SECONDS * 1_000_000_000
    clock: Callable[[], int] = field(default=time.time_ns)

    def now_ns(self) -> int:
        return self.clock()


def parse_unsigned(value: Any) -> int | None:
    """
    Parse a JSON timestamp/counter into a non-negative int.

    Returns None for anything that is not a non-negative integral value; the
    structural layer reports those, so callers skip the check. Values beyond
    the uint64 range are returned as-is: the structural layer reports the
    range and ordering checks still compare them.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL.fullmatch(text):
            return None
        try:
            number = int(text)
        except ValueError:
            # beyond the interpreter's int conversion digit limit
            return None
    else:
        return None
    if number < 0:
        return None
    return number


def is_real_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_zero_trace_id(value: Any) -> bool:
    return value == ZERO_TRACE_ID


def is_zero_span_id(value: Any) -> bool:
    return value == ZERO_SPAN_ID


def dict_items(container: Any, key: str) -> Iterator[tuple[int, dict[str, Any]]]:
    """(index, element) for the dict elements of container[key] when it is a list."""
    if not isinstance(container, dict):
        return
    values = container.get(key)
    if not isinstance(values, list):
        return
    for index, value in enumerate(values):
        if isinstance(value, dict):
            yield index, value


def iter_records(
    payload: Any,
    resource_key: str,
    scope_key: str,
    record_key: str,
) -> Iterator[tuple[str, dict[str, Any]]]:
    """
    Walk resource -> scope -> record containers in document order.

    :return: (JSON pointer of the record, record) pairs.
    """
    for r_idx, resource in dict_items(payload, resource_key):
        for s_idx, scope in dict_items(resource, scope_key):
            for rec_idx, record in dict_items(scope, record_key):
                path = f"/{resource_key}/{r_idx}/{scope_key}/{s_idx}/{record_key}/{rec_idx}"
                yield path, record
