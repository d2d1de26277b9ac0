"""Element kinds, their coercion order, and per-kind missing sentinels.

Every conversion between kinds goes through this module: `coerce` and
`coerce_data` move values up the lattice (the only implicit direction),
`cast` performs the explicit conversions behind `as_kind`.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable

import jax
import jax.numpy as jnp

from .errors import VectorTypeError


# DOUBLE is float64; without x64 jax would silently narrow it to float32.
jax.config.update("jax_enable_x64", True)


class ElementKind(str, Enum):
    LOGICAL = "logical"
    INTEGER = "integer"
    DOUBLE = "double"
    CHARACTER = "character"


_RANKS: Final[dict[ElementKind, int]] = {
    ElementKind.LOGICAL: 0,
    ElementKind.INTEGER: 1,
    ElementKind.DOUBLE: 2,
    ElementKind.CHARACTER: 3,
}

STORAGE_DTYPES: Final[dict[ElementKind, object]] = {
    ElementKind.LOGICAL: jnp.bool_,
    ElementKind.INTEGER: jnp.int32,
    ElementKind.DOUBLE: jnp.float64,
}

# -2**31 is reserved for NA_integer_ in R, so the usable range is symmetric.
INT_MAX: Final[int] = 2**31 - 1
INT_MIN: Final[int] = -INT_MAX

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"TRUE", "true", "True", "T"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"FALSE", "false", "False", "F"})


@dataclass(frozen=True)
class Missing:
    """The NA sentinel of one element kind."""

    kind: ElementKind

    def __repr__(self) -> str:
        if self.kind is ElementKind.LOGICAL:
            return "NA"
        suffix = {"integer": "integer_", "double": "real_", "character": "character_"}[self.kind.value]
        return f"NA_{suffix}"

    def __bool__(self) -> bool:
        raise VectorTypeError("missing value where TRUE/FALSE needed")


NA: Final[Missing] = Missing(ElementKind.LOGICAL)
NA_INTEGER: Final[Missing] = Missing(ElementKind.INTEGER)
NA_REAL: Final[Missing] = Missing(ElementKind.DOUBLE)
NA_CHARACTER: Final[Missing] = Missing(ElementKind.CHARACTER)


def rank_of(kind: ElementKind) -> int:
    return _RANKS[ElementKind(kind)]


def highest_kind(kinds: Iterable[ElementKind]) -> ElementKind:
    """Maximum-rank kind; LOGICAL for an empty collection."""
    best = ElementKind.LOGICAL
    for kind in kinds:
        if _RANKS[kind] > _RANKS[best]:
            best = kind
    return best


def missing_of(kind: ElementKind) -> Missing:
    return Missing(ElementKind(kind))


def is_missing(value: object) -> bool:
    return value is None or isinstance(value, Missing)


def filler_of(kind: ElementKind):
    """Payload stored under a missing slot; never observable through the mask."""
    if kind is ElementKind.CHARACTER:
        return ""
    if kind is ElementKind.LOGICAL:
        return False
    if kind is ElementKind.INTEGER:
        return 0
    return 0.0


def _unwrap_scalar(value: object) -> object:
    if isinstance(value, jax.Array) or type(value).__module__ == "numpy":
        if getattr(value, "ndim", 0) != 0:
            raise VectorTypeError(f"expected a scalar, got an array of shape {tuple(value.shape)}")
        return value.item()
    return value


def kind_of_scalar(value: object) -> ElementKind:
    value = _unwrap_scalar(value)
    if value is None:
        return ElementKind.LOGICAL
    if isinstance(value, Missing):
        return value.kind
    if isinstance(value, bool):
        return ElementKind.LOGICAL
    if isinstance(value, numbers.Integral):
        if INT_MIN <= int(value) <= INT_MAX:
            return ElementKind.INTEGER
        return ElementKind.DOUBLE
    if isinstance(value, numbers.Real):
        return ElementKind.DOUBLE
    if isinstance(value, str):
        return ElementKind.CHARACTER
    raise VectorTypeError(f"unsupported element value of type {type(value).__name__}")


def format_scalar(value: object) -> str:
    """Locale-independent text rendering used for coercion to CHARACTER."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    real = float(value)
    if math.isnan(real):
        return "NaN"
    if math.isinf(real):
        return "Inf" if real > 0 else "-Inf"
    if real == 0:
        return "0"
    return format(real, ".15g")


def coerce(value: object, target_kind: ElementKind):
    """Convert one scalar up the lattice to `target_kind`."""
    value = _unwrap_scalar(value)
    target_kind = ElementKind(target_kind)
    source = kind_of_scalar(value)
    if _RANKS[target_kind] < _RANKS[source]:
        raise VectorTypeError(f"cannot implicitly coerce {source.value} to {target_kind.value}")
    if is_missing(value):
        return missing_of(target_kind)
    if target_kind is ElementKind.LOGICAL:
        return bool(value)
    if target_kind is ElementKind.INTEGER:
        return int(value)
    if target_kind is ElementKind.DOUBLE:
        return float(value)
    return format_scalar(value)


def coerce_data(data, na: jnp.ndarray, source: ElementKind, target: ElementKind):
    """Storage-level `coerce`: convert a whole data payload up the lattice."""
    if source is target:
        return data
    if _RANKS[target] < _RANKS[source]:
        raise VectorTypeError(f"cannot implicitly coerce {source.value} to {target.value}")
    if target is ElementKind.CHARACTER:
        flags = na.tolist()
        return tuple("" if missing else format_scalar(item) for item, missing in zip(data.tolist(), flags))
    return data.astype(STORAGE_DTYPES[target])


def _parse_number(text: str) -> float | None:
    token = text.strip()
    if token in {"Inf", "+Inf", "inf"}:
        return math.inf
    if token in {"-Inf", "-inf"}:
        return -math.inf
    if token == "NaN":
        return math.nan
    if not token or "_" in token or token.lower() in {"nan", "infinity", "-infinity", "+infinity"}:
        return None
    try:
        return float(token)
    except ValueError:
        return None


def _real_to_integer(real: float):
    if math.isnan(real) or math.isinf(real):
        return NA_INTEGER
    whole = int(real)
    if whole < INT_MIN or whole > INT_MAX:
        return NA_INTEGER
    return whole


def cast(value: object, target_kind: ElementKind):
    """Explicit conversion in any direction.

    Values that cannot be represented in the target kind become that kind's
    missing sentinel; callers report the loss.
    """
    value = _unwrap_scalar(value)
    target_kind = ElementKind(target_kind)
    source = kind_of_scalar(value)
    if is_missing(value):
        return missing_of(target_kind)
    if _RANKS[target_kind] >= _RANKS[source]:
        return coerce(value, target_kind)

    if target_kind is ElementKind.LOGICAL:
        if source is ElementKind.CHARACTER:
            if value in _TRUE_STRINGS:
                return True
            if value in _FALSE_STRINGS:
                return False
            return NA
        if isinstance(value, float) and math.isnan(value):
            return NA
        return value != 0

    if target_kind is ElementKind.INTEGER:
        if source is ElementKind.CHARACTER:
            parsed = _parse_number(value)
            return NA_INTEGER if parsed is None else _real_to_integer(parsed)
        return _real_to_integer(float(value))

    # DOUBLE from CHARACTER is the only remaining downward step.
    parsed = _parse_number(value)
    return NA_REAL if parsed is None else parsed
