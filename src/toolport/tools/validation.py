"""
Schema validation for tool arguments.

A single function interprets every parameter variant: it coerces raw
values to the declared type, fills in defaults and enforces enum and
format constraints. Validation is all-or-nothing; the first violation
raises and no partial result is returned. Keys the schema does not
declare are ignored so that newer clients can talk to older servers.
"""

import copy
import json
import math
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlsplit

from toolport.tools.errors import (
    InvalidEnumValueError,
    InvalidFormatError,
    MissingRequiredParameterError,
    TypeMismatchError,
)
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringListParam,
    StringMapParam,
    StringParam,
    ToolParameter,
)

_TRUE_STRINGS = {"true"}
_FALSE_STRINGS = {"false"}


def validate(parameters: Iterable[ToolParameter], raw_arguments: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Validate raw arguments against a parameter schema.

    Args:
        parameters: Declared parameter specs, in order.
        raw_arguments: Untrusted key/value mapping from the caller.

    Returns:
        Mapping with every declared parameter present. Optional parameters
        that were neither supplied nor defaulted map to None.

    Raises:
        MissingRequiredParameterError: A required parameter is absent.
        TypeMismatchError: A value cannot be read as the declared type.
        InvalidEnumValueError: A value is not an allowed choice.
        InvalidFormatError: A value violates a format or range constraint.
    """
    raw_arguments = raw_arguments or {}
    validated: dict[str, Any] = {}

    for spec in parameters:
        raw = raw_arguments.get(spec.name)

        if raw is None:
            if spec.default is not None:
                validated[spec.name] = copy.deepcopy(spec.default)
            elif spec.required:
                raise MissingRequiredParameterError(spec.name)
            else:
                validated[spec.name] = None
            continue

        value = coerce(spec, raw)
        _check_constraints(spec, value)
        validated[spec.name] = value

    return validated


def coerce(spec: ToolParameter, raw: Any) -> Any:
    """Coerce a single raw value to the type declared by ``spec``."""
    if isinstance(spec, (StringParam, EnumParam)):
        return _coerce_string(spec, raw)
    if isinstance(spec, NumberParam):
        return _coerce_number(spec, raw)
    if isinstance(spec, BooleanParam):
        return _coerce_boolean(spec, raw)
    if isinstance(spec, StringListParam):
        return _coerce_string_list(spec, raw)
    if isinstance(spec, StringMapParam):
        return _coerce_string_map(spec, raw)

    # Should never reach here
    raise TypeError(f"Unsupported parameter spec: {type(spec).__name__}")


def is_valid_url(value: str) -> bool:
    """Syntactic URL check: absolute, with a scheme and a host."""
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.hostname)


# =============================================================================
# Coercion helpers
# =============================================================================


def _coerce_string(spec: ToolParameter, raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    raise TypeMismatchError(spec.name, "string", raw)


def _coerce_number(spec: NumberParam, raw: Any) -> int | float:
    expected = "integer" if spec.integer else "number"

    if isinstance(raw, bool):
        raise TypeMismatchError(spec.name, expected, raw)

    if isinstance(raw, (int, float)):
        value: int | float = raw
    elif isinstance(raw, str):
        text = raw.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise TypeMismatchError(spec.name, expected, raw) from None
    else:
        raise TypeMismatchError(spec.name, expected, raw)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeMismatchError(spec.name, expected, raw)
        if spec.integer:
            if not value.is_integer():
                raise TypeMismatchError(spec.name, expected, raw)
            value = int(value)

    return value


def _coerce_boolean(spec: BooleanParam, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise TypeMismatchError(spec.name, "boolean", raw)


def _coerce_string_list(spec: StringListParam, raw: Any) -> list[str]:
    if isinstance(raw, str):
        decoded = _decode_json(raw, list)
        if decoded is None:
            raise TypeMismatchError(spec.name, "array of strings", raw)
        raw = decoded

    if not isinstance(raw, (list, tuple)):
        raise TypeMismatchError(spec.name, "array of strings", raw)

    items = []
    for item in raw:
        if not isinstance(item, str):
            raise TypeMismatchError(spec.name, "array of strings", raw)
        items.append(item)
    return items


def _coerce_string_map(spec: StringMapParam, raw: Any) -> dict[str, str]:
    if isinstance(raw, str):
        decoded = _decode_json(raw, dict)
        if decoded is None:
            raise TypeMismatchError(spec.name, "object of strings", raw)
        raw = decoded

    if not isinstance(raw, Mapping):
        raise TypeMismatchError(spec.name, "object of strings", raw)

    result: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise TypeMismatchError(spec.name, "object of strings", raw)
        if isinstance(value, str):
            result[key] = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            result[key] = str(value)
        else:
            raise TypeMismatchError(spec.name, "object of strings", raw)
    return result


def _decode_json(text: str, expected: type) -> Any:
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, expected) else None


# =============================================================================
# Constraints
# =============================================================================


def _check_constraints(spec: ToolParameter, value: Any) -> None:
    if isinstance(spec, EnumParam):
        if value not in spec.allowed:
            raise InvalidEnumValueError(spec.name, list(spec.allowed), value)

    elif isinstance(spec, StringParam):
        if spec.format == "url" and not is_valid_url(value):
            raise InvalidFormatError(spec.name, "must be a valid URL")

    elif isinstance(spec, NumberParam):
        if spec.minimum is not None and value < spec.minimum:
            raise InvalidFormatError(spec.name, f"must be >= {_fmt(spec.minimum)}")
        if spec.maximum is not None and value > spec.maximum:
            raise InvalidFormatError(spec.name, f"must be <= {_fmt(spec.maximum)}")


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)
