"""Structured error and warning types for the vector engine."""

from __future__ import annotations

from dataclasses import dataclass


class VectorError(Exception):
    """Base class for structured atomvec errors."""


class VectorIndexError(VectorError):
    """Index specification cannot be resolved."""


@dataclass(frozen=True)
class MixedSignIndexError(VectorIndexError):
    """Positive and negative subscripts (or NA with negatives) in one index spec."""

    positive: tuple[int, ...] = ()
    negative: tuple[int, ...] = ()
    has_missing: bool = False

    def __str__(self) -> str:
        if self.has_missing and not self.positive:
            return f"can't mix NA with negative subscripts {list(self.negative)}"
        return (
            f"can't mix positive subscripts {list(self.positive)} "
            f"with negative subscripts {list(self.negative)}"
        )


class VectorLengthError(VectorError):
    """Operand lengths are incompatible."""


class IncompatibleLengthError(VectorLengthError):
    """Zero-length operand paired with a non-empty one, or recycling refused."""


class VectorTypeError(VectorError):
    """Element kind (or Python value type) is not valid for the operation."""


class VectorArgumentError(VectorError):
    """Scalar argument outside its valid domain."""


class InvalidStepError(VectorArgumentError):
    """`sequence` step is zero or points away from the end value."""


class VectorWarning(UserWarning):
    """Base class for advisory atomvec warnings."""


class RecycleLengthWarning(VectorWarning):
    """Longer length is not a multiple of the shorter one."""


class IntegerOverflowWarning(VectorWarning):
    """Integer arithmetic left the 32-bit range; affected positions are NA."""


class CoercionWarning(VectorWarning):
    """Explicit conversion turned present values into NA."""
