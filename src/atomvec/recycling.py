"""Length alignment by cyclic reuse of shorter operands."""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from typing import Final

import jax.numpy as jnp

from .errors import IncompatibleLengthError, RecycleLengthWarning, VectorArgumentError


logger = logging.getLogger(__name__)

_STRICT_RECYCLING: Final[bool] = os.environ.get("ATOMVEC_STRICT_RECYCLING", "0") == "1"


@dataclass(frozen=True)
class Alignment:
    """Result of aligning operand lengths.

    `lengths[k]` is the length of operand `k`; output position `i` reads
    operand `k` at `i mod lengths[k]`. `warning` is set when some operand
    length does not divide `length`; call `emit` to surface it.
    """

    lengths: tuple[int, ...]
    length: int
    warning: RecycleLengthWarning | None = None

    def index(self, operand: int, i: int) -> int:
        return i % self.lengths[operand]

    def index_a(self, i: int) -> int:
        return self.index(0, i)

    def index_b(self, i: int) -> int:
        return self.index(1, i)

    def indices(self, operand: int) -> jnp.ndarray:
        if self.length == 0:
            return jnp.zeros((0,), dtype=jnp.int32)
        return cycle_indices(self.length, self.lengths[operand])

    def indices_a(self) -> jnp.ndarray:
        return self.indices(0)

    def indices_b(self) -> jnp.ndarray:
        return self.indices(1)

    def emit(self, stacklevel: int = 3) -> None:
        if self.warning is None:
            return
        logger.debug("recycling warning for lengths %s: %s", self.lengths, self.warning)
        warnings.warn(self.warning, stacklevel=stacklevel)


def cycle_indices(target_len: int, source_len: int) -> jnp.ndarray:
    """0-based source indices that cycle `source_len` elements over `target_len` slots."""
    return (jnp.arange(target_len) % source_len).astype(jnp.int32)


def _check_lengths(lengths: tuple[int, ...]) -> None:
    for value in lengths:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise VectorArgumentError(f"lengths must be non-negative integers, got {value!r}")


def _mismatch(message: str) -> RecycleLengthWarning:
    if _STRICT_RECYCLING:
        raise IncompatibleLengthError(message)
    return RecycleLengthWarning(message)


def align_many(*lengths: int) -> Alignment:
    """Align any number of operand lengths to the longest."""
    _check_lengths(lengths)
    if not lengths:
        return Alignment(lengths=(), length=0)
    longest = max(lengths)
    if longest == 0:
        return Alignment(lengths=lengths, length=0)
    if min(lengths) == 0:
        raise IncompatibleLengthError(
            f"cannot recycle a zero-length operand against length {longest} (lengths {list(lengths)})"
        )
    warning = None
    uneven = sorted({n for n in lengths if longest % n})
    if uneven:
        warning = _mismatch(
            f"longer object length {longest} is not a multiple of shorter object length {uneven[0]}"
        )
    return Alignment(lengths=lengths, length=longest, warning=warning)


def align(len_a: int, len_b: int) -> Alignment:
    """Pairwise alignment: result length is `max(len_a, len_b)`."""
    return align_many(len_a, len_b)


def recycle_to(target_len: int, source_len: int) -> Alignment:
    """Recycle a source of `source_len` elements onto exactly `target_len` slots.

    Operand 0 is the target, operand 1 the source. A longer source is
    truncated with a warning.
    """
    _check_lengths((target_len, source_len))
    if target_len == 0:
        return Alignment(lengths=(target_len, source_len), length=0)
    if source_len == 0:
        raise IncompatibleLengthError(f"replacement has length zero for {target_len} target position(s)")
    warning = None
    if target_len % source_len:
        warning = _mismatch(
            f"number of items to replace ({target_len}) is not a multiple of replacement length ({source_len})"
        )
    return Alignment(lengths=(target_len, source_len), length=target_len, warning=warning)
