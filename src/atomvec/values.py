"""Vector value model, storage snapshots, and construction operations."""

from __future__ import annotations

import math
import numbers
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Sequence

import jax
import jax.numpy as jnp

from .errors import (
    CoercionWarning,
    InvalidStepError,
    VectorArgumentError,
    VectorLengthError,
    VectorTypeError,
)
from .lattice import (
    INT_MAX,
    INT_MIN,
    STORAGE_DTYPES,
    ElementKind,
    cast,
    coerce,
    coerce_data,
    filler_of,
    highest_kind,
    is_missing,
    kind_of_scalar,
    rank_of,
)


# Relative tolerance, in step widths, when deciding whether `to` is reached.
_SEQUENCE_FUZZ = 1e-10


@dataclass(frozen=True, eq=False)
class Storage:
    """Immutable snapshot of a vector's contents.

    `data` is a jax array for LOGICAL/INTEGER/DOUBLE and a tuple of `str` for
    CHARACTER. `na` is a parallel boolean mask; the payload under a missing
    slot is the kind's filler and carries no meaning.
    """

    kind: ElementKind
    data: object
    na: jnp.ndarray
    names: tuple[str, ...] | None = None

    def __len__(self) -> int:
        return int(self.na.shape[0])

    def with_kind(self, kind: ElementKind) -> "Storage":
        if kind is self.kind:
            return self
        return replace(self, kind=kind, data=coerce_data(self.data, self.na, self.kind, kind))

    def grown(self, length: int, *, with_names: bool = False) -> "Storage":
        """Extend to `length` with missing slots and empty names."""
        current = len(self)
        extra = max(0, length - current)
        names = self.names
        if names is None and with_names:
            names = ("",) * current
        if extra == 0:
            return replace(self, names=names)
        na = jnp.concatenate((self.na, jnp.ones((extra,), dtype=jnp.bool_)))
        if self.kind is ElementKind.CHARACTER:
            data = self.data + ("",) * extra
        else:
            fill = jnp.full((extra,), filler_of(self.kind), dtype=STORAGE_DTYPES[self.kind])
            data = jnp.concatenate((self.data, fill))
        if names is not None:
            names = names + ("",) * extra
        return Storage(kind=self.kind, data=data, na=na, names=names)

    def values(self) -> list:
        if self.kind is ElementKind.CHARACTER:
            items = list(self.data)
        else:
            items = self.data.tolist()
        return [None if missing else item for item, missing in zip(items, self.na.tolist())]


def _empty_storage(kind: ElementKind) -> Storage:
    if kind is ElementKind.CHARACTER:
        data: object = ()
    else:
        data = jnp.zeros((0,), dtype=STORAGE_DTYPES[kind])
    return Storage(kind=kind, data=data, na=jnp.zeros((0,), dtype=jnp.bool_))


def storage_from_scalars(values: Sequence[object], kind: ElementKind | None = None, names=None) -> Storage:
    """Build storage from Python scalars, coercing each up to `kind`."""
    if kind is None:
        kind = highest_kind(kind_of_scalar(item) for item in values)
    coerced = [coerce(item, kind) for item in values]
    if not coerced:
        storage = _empty_storage(kind)
        return replace(storage, names=tuple(names) if names is not None else None)
    missing = [is_missing(item) for item in coerced]
    filler = filler_of(kind)
    payload = [filler if flag else item for item, flag in zip(coerced, missing)]
    if kind is ElementKind.CHARACTER:
        data: object = tuple(payload)
    else:
        data = jnp.asarray(payload, dtype=STORAGE_DTYPES[kind])
    return Storage(
        kind=kind,
        data=data,
        na=jnp.asarray(missing, dtype=jnp.bool_),
        names=tuple(names) if names is not None else None,
    )


def _storage_from_array(array) -> Storage:
    arr = jnp.asarray(array)
    if arr.ndim == 0:
        return storage_from_scalars([arr.item()])
    if arr.ndim != 1:
        raise VectorTypeError(f"vectors are one-dimensional; got an array of shape {tuple(arr.shape)}")
    if arr.dtype == jnp.bool_:
        kind = ElementKind.LOGICAL
    elif jnp.issubdtype(arr.dtype, jnp.integer):
        kind = ElementKind.INTEGER
        if arr.shape[0] and (int(arr.max()) > INT_MAX or int(arr.min()) < INT_MIN):
            kind = ElementKind.DOUBLE
    elif jnp.issubdtype(arr.dtype, jnp.floating):
        kind = ElementKind.DOUBLE
    else:
        raise VectorTypeError(f"unsupported array dtype {arr.dtype}")
    return Storage(
        kind=kind,
        data=arr.astype(STORAGE_DTYPES[kind]),
        na=jnp.zeros(arr.shape, dtype=jnp.bool_),
    )


class Vector:
    """One-dimensional, homogeneously typed sequence with optional names.

    Reads never expose mutable internals: the payload is a jax array or a
    tuple, both immutable. `assign` is the only operation that changes a
    vector, and it does so by swapping the whole storage snapshot.
    """

    __slots__ = ("_storage", "_name_index")

    def __init__(self, storage: Storage) -> None:
        if storage.names is not None and len(storage.names) != len(storage):
            raise VectorLengthError(
                f"names has length {len(storage.names)} but the vector has length {len(storage)}"
            )
        self._storage = storage
        self._name_index: dict[str, tuple[int, ...]] | None = None

    @classmethod
    def of(cls, values: Iterable[object], kind: ElementKind | None = None, names=None) -> "Vector":
        return cls(storage_from_scalars(list(values), kind, names))

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def kind(self) -> ElementKind:
        return self._storage.kind

    @property
    def names(self) -> tuple[str, ...] | None:
        return self._storage.names

    @property
    def data(self):
        return self._storage.data

    @property
    def na(self) -> jnp.ndarray:
        return self._storage.na

    def __len__(self) -> int:
        return len(self._storage)

    def __iter__(self) -> Iterator[object]:
        return iter(self.to_list())

    def to_list(self) -> list:
        """Python values with `None` for missing elements."""
        return self._storage.values()

    def __repr__(self) -> str:
        return f"Vector(kind={self.kind.value}, values={self.to_list()!r}, names={self.names!r})"

    def _swap(self, storage: Storage) -> None:
        self._storage = storage
        self._name_index = None

    def name_index(self) -> dict[str, tuple[int, ...]]:
        """name -> ascending 0-based positions, built on first use."""
        if self._name_index is None:
            index: dict[str, list[int]] = {}
            for position, name in enumerate(self.names or ()):
                if name:
                    index.setdefault(name, []).append(position)
            self._name_index = {name: tuple(positions) for name, positions in index.items()}
        return self._name_index

    def first_position(self, name: str) -> int | None:
        positions = self.name_index().get(name)
        return positions[0] if positions else None

    def gather(self, positions: Sequence[int], *, keep_names: bool) -> "Vector":
        """New vector from 0-based positions; negative or out-of-range ones are missing slots."""
        storage = self._storage
        n = len(storage)
        slots = [p if 0 <= p < n else -1 for p in positions]
        names = None
        if keep_names:
            source_names = storage.names
            names = tuple(source_names[p] if p >= 0 and source_names is not None else "" for p in slots)
        if not slots:
            return Vector(replace(_empty_storage(storage.kind), names=names))

        slot_missing = jnp.asarray([p < 0 for p in slots], dtype=jnp.bool_)
        if storage.kind is ElementKind.CHARACTER:
            data: object = tuple(storage.data[p] if p >= 0 else "" for p in slots)
            flags = storage.na.tolist()
            na = jnp.asarray([p < 0 or flags[p] for p in slots], dtype=jnp.bool_)
            return Vector(Storage(kind=storage.kind, data=data, na=na, names=names))

        if n == 0:
            grown = storage.grown(len(slots))
            return Vector(replace(grown, names=names))
        index = jnp.asarray([max(p, 0) for p in slots], dtype=jnp.int32)
        na = storage.na[index] | slot_missing
        data = jnp.where(na, filler_of(storage.kind), storage.data[index]).astype(STORAGE_DTYPES[storage.kind])
        return Vector(Storage(kind=storage.kind, data=data, na=na, names=names))

    # Arithmetic and ordering operators delegate to the vectorized ops.

    def __add__(self, other):
        from .ops import binary_op

        return binary_op("+", self, other)

    def __radd__(self, other):
        from .ops import binary_op

        return binary_op("+", other, self)

    def __sub__(self, other):
        from .ops import binary_op

        return binary_op("-", self, other)

    def __rsub__(self, other):
        from .ops import binary_op

        return binary_op("-", other, self)

    def __mul__(self, other):
        from .ops import binary_op

        return binary_op("*", self, other)

    def __rmul__(self, other):
        from .ops import binary_op

        return binary_op("*", other, self)

    def __truediv__(self, other):
        from .ops import binary_op

        return binary_op("/", self, other)

    def __rtruediv__(self, other):
        from .ops import binary_op

        return binary_op("/", other, self)

    def __lt__(self, other):
        from .ops import binary_op

        return binary_op("<", self, other)

    def __le__(self, other):
        from .ops import binary_op

        return binary_op("<=", self, other)

    def __gt__(self, other):
        from .ops import binary_op

        return binary_op(">", self, other)

    def __ge__(self, other):
        from .ops import binary_op

        return binary_op(">=", self, other)

    def __neg__(self):
        from .ops import negate

        return negate(self)


def as_vector(value: object) -> Vector:
    """Treat any accepted input as a vector; scalars are length-1 vectors."""
    if isinstance(value, Vector):
        return value
    if isinstance(value, Mapping):
        return Vector.of(value.values(), names=[str(key) for key in value.keys()])
    if isinstance(value, (list, tuple)):
        return combine(*value)
    if isinstance(value, jax.Array) or type(value).__module__ == "numpy":
        return Vector(_storage_from_array(value))
    return Vector.of([value])


def combine(*values: object) -> Vector:
    """Concatenate values into one vector of their highest-ranked kind."""
    parts = [as_vector(value) for value in values]
    if not parts:
        return Vector(_empty_storage(ElementKind.LOGICAL))
    kind = highest_kind(part.kind for part in parts)
    storages = [part.storage.with_kind(kind) for part in parts]
    na = jnp.concatenate([storage.na for storage in storages])
    if kind is ElementKind.CHARACTER:
        data: object = tuple(item for storage in storages for item in storage.data)
    else:
        data = jnp.concatenate([storage.data for storage in storages]).astype(STORAGE_DTYPES[kind])

    names = None
    if any(storage.names is not None for storage in storages):
        names = tuple(
            name
            for storage in storages
            for name in (storage.names if storage.names is not None else ("",) * len(storage))
        )
    return Vector(Storage(kind=kind, data=data, na=na, names=names))


def _as_real(value: object, *, where: str) -> float:
    if isinstance(value, Vector):
        if len(value) != 1 or value.kind is ElementKind.CHARACTER:
            raise VectorArgumentError(f"{where} must be a single number")
        value = value.to_list()[0]
    if is_missing(value) or not isinstance(value, numbers.Real):
        raise VectorArgumentError(f"{where} must be a finite number")
    real = float(value)
    if not math.isfinite(real):
        raise VectorArgumentError(f"{where} must be a finite number")
    return real


def sequence(from_, to, step=None) -> Vector:
    """`from_, from_ + step, ...` up to and including `to` where reached."""
    start = _as_real(from_, where="'from'")
    end = _as_real(to, where="'to'")
    if step is None:
        by = 1.0 if end >= start else -1.0
        integer = start.is_integer()
    else:
        by = _as_real(step, where="'step'")
        integer = (
            isinstance(from_, numbers.Integral)
            and isinstance(step, numbers.Integral)
            and not isinstance(from_, bool)
            and not isinstance(step, bool)
        )

    if by == 0:
        if start != end:
            raise InvalidStepError(f"step must be non-zero when from ({start:g}) != to ({end:g})")
        count = 1
    else:
        span = (end - start) / by
        if span < -_SEQUENCE_FUZZ:
            raise InvalidStepError(f"wrong sign in step {by:g} for sequence from {start:g} to {end:g}")
        count = int(math.floor(span + _SEQUENCE_FUZZ)) + 1

    last = start + by * (count - 1)
    if integer and INT_MIN <= min(start, last) and max(start, last) <= INT_MAX:
        values = int(start) + int(by) * jnp.arange(count)
        return Vector(
            Storage(
                kind=ElementKind.INTEGER,
                data=values.astype(jnp.int32),
                na=jnp.zeros((count,), dtype=jnp.bool_),
            )
        )
    values = start + by * jnp.arange(count, dtype=jnp.float64)
    return Vector(
        Storage(
            kind=ElementKind.DOUBLE,
            data=values.astype(STORAGE_DTYPES[ElementKind.DOUBLE]),
            na=jnp.zeros((count,), dtype=jnp.bool_),
        )
    )


def _as_count(value: object, *, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise VectorArgumentError(f"{where} must be a non-negative integer")
    real = float(value)
    if not real.is_integer() or real < 0:
        raise VectorArgumentError(f"{where} must be a non-negative integer, got {value!r}")
    return int(real)


def repeat(value: object, times: int, each: int = 1) -> Vector:
    """Cycle the whole input `times` times, after repeating each element `each` times."""
    vec = as_vector(value)
    count = _as_count(times, where="'times'")
    per_element = _as_count(each, where="'each'")
    positions = [p for p in range(len(vec)) for _ in range(per_element)] * count
    return vec.gather(positions, keep_names=vec.names is not None)


def length(v: object) -> int:
    return len(as_vector(v))


def names(v: object) -> tuple[str, ...] | None:
    return as_vector(v).names


def set_names(v: object, new_names) -> Vector:
    """Copy of `v` carrying `new_names`; `None` removes names."""
    vec = as_vector(v)
    storage = vec.storage
    if new_names is None:
        return Vector(replace(storage, names=None))
    labels = as_vector(new_names)
    if len(labels) > len(vec):
        raise VectorLengthError(
            f"'names' attribute [{len(labels)}] must be the same length as the vector [{len(vec)}]"
        )
    text = [
        "" if item is None else item
        for item in labels.storage.with_kind(ElementKind.CHARACTER).values()
    ]
    text.extend([""] * (len(vec) - len(text)))
    return Vector(replace(storage, names=tuple(text)))


def is_na(v: object) -> Vector:
    vec = as_vector(v)
    return Vector(
        Storage(
            kind=ElementKind.LOGICAL,
            data=vec.na,
            na=jnp.zeros_like(vec.na),
            names=vec.names,
        )
    )


def _same_value(left: object, right: object) -> bool:
    if isinstance(left, float) and isinstance(right, float) and math.isnan(left) and math.isnan(right):
        return True
    return left == right


def identical(a: object, b: object) -> bool:
    """Same kind, length, values, missingness, and names."""
    left = as_vector(a)
    right = as_vector(b)
    if left.kind is not right.kind or len(left) != len(right) or left.names != right.names:
        return False
    return all(_same_value(x, y) for x, y in zip(left.to_list(), right.to_list()))


def as_kind(v: object, kind: ElementKind) -> Vector:
    """Explicit conversion of every element to `kind`, in any direction."""
    vec = as_vector(v)
    kind = ElementKind(kind)
    storage = vec.storage
    if rank_of(kind) >= rank_of(vec.kind):
        return Vector(storage.with_kind(kind))

    items = storage.values()
    converted = [cast(item, kind) for item in items]
    lost = sum(1 for item, out in zip(items, converted) if item is not None and is_missing(out))
    if lost:
        warnings.warn(
            CoercionWarning(f"NAs introduced by coercion to {kind.value} ({lost} element(s))"),
            stacklevel=2,
        )
    return Vector(storage_from_scalars(converted, kind, storage.names))
