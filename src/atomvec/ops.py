"""Vectorized arithmetic, comparison, logical, and mapped operations."""

from __future__ import annotations

import operator
import warnings
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .errors import IntegerOverflowWarning, VectorArgumentError, VectorTypeError
from .lattice import INT_MAX, INT_MIN, STORAGE_DTYPES, ElementKind, highest_kind
from .recycling import Alignment, align, align_many
from .values import Storage, Vector, as_vector, storage_from_scalars


def _floor_divide(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    if jnp.issubdtype(w.dtype, jnp.floating):
        # x / 0 keeps its infinity instead of going through a NaN remainder.
        return jnp.floor(w / x)
    return jnp.floor_divide(w, x)


def _modulo(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    # Result takes the sign of the divisor.
    return jnp.mod(w, x)


_ARITHMETIC_OPS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "+": lambda w, x: w + x,
    "-": lambda w, x: w - x,
    "*": lambda w, x: w * x,
    "/": lambda w, x: w / x,
    "^": lambda w, x: jnp.power(w, x),
    "%%": _modulo,
    "%/%": _floor_divide,
}

# Operators whose result is DOUBLE even for INTEGER operands.
_DOUBLE_RESULT_OPS: Final[frozenset[str]] = frozenset({"/", "^"})

_COMPARISON_OPS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "<": jnp.less,
    "<=": jnp.less_equal,
    ">": jnp.greater,
    ">=": jnp.greater_equal,
    "==": jnp.equal,
    "!=": jnp.not_equal,
}

_TEXT_COMPARISON_OPS: Final[dict[str, Callable[[str, str], bool]]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

_LOGICAL_OPS: Final[frozenset[str]] = frozenset({"&", "|"})


def _result_names(a: Vector, b: Vector, length: int) -> tuple[str, ...] | None:
    if len(a) == length and a.names is not None:
        return a.names
    if len(b) == length and b.names is not None:
        return b.names
    return None


def _aligned(storage: Storage, kind: ElementKind, index: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    converted = storage.with_kind(kind)
    return converted.data[index], converted.na[index]


def _finish(kind: ElementKind, data: jnp.ndarray, na: jnp.ndarray, names) -> Vector:
    dtype = STORAGE_DTYPES[kind]
    if data.shape[0]:
        data = jnp.where(na, jnp.zeros((), dtype=dtype), data)
    return Vector(Storage(kind=kind, data=data.astype(dtype), na=na, names=names))


def _arithmetic(op: str, a: Vector, b: Vector, alignment: Alignment) -> Vector:
    kind = highest_kind((a.kind, b.kind, ElementKind.INTEGER))
    if op in _DOUBLE_RESULT_OPS:
        kind = ElementKind.DOUBLE
    names = _result_names(a, b, alignment.length)
    xa, na_a = _aligned(a.storage, kind, alignment.indices_a())
    xb, na_b = _aligned(b.storage, kind, alignment.indices_b())
    na = na_a | na_b
    fn = _ARITHMETIC_OPS[op]

    if kind is ElementKind.DOUBLE:
        return _finish(kind, fn(xa, xb), na, names)

    wide_a = xa.astype(jnp.int64)
    wide_b = xb.astype(jnp.int64)
    if op in ("%%", "%/%"):
        zero = wide_b == 0
        na = na | zero
        wide_b = jnp.where(zero, 1, wide_b)
    result = fn(wide_a, wide_b)
    overflow = ((result > INT_MAX) | (result < INT_MIN)) & ~na
    if bool(jnp.any(overflow)):
        warnings.warn(IntegerOverflowWarning(f"NAs produced by integer overflow in {op!r}"), stacklevel=3)
        na = na | overflow
    return _finish(kind, result, na, names)


def _comparison(op: str, a: Vector, b: Vector, alignment: Alignment) -> Vector:
    kind = highest_kind((a.kind, b.kind))
    names = _result_names(a, b, alignment.length)
    if kind is ElementKind.CHARACTER:
        left = a.storage.with_kind(kind)
        right = b.storage.with_kind(kind)
        na_a = a.na[alignment.indices_a()]
        na_b = b.na[alignment.indices_b()]
        compare = _TEXT_COMPARISON_OPS[op]
        flags = [
            compare(left.data[alignment.index_a(i)], right.data[alignment.index_b(i)])
            for i in range(alignment.length)
        ]
        data = jnp.asarray(flags, dtype=jnp.bool_) if flags else jnp.zeros((0,), dtype=jnp.bool_)
        return _finish(ElementKind.LOGICAL, data, na_a | na_b, names)

    kind = highest_kind((kind, ElementKind.INTEGER))
    xa, na_a = _aligned(a.storage, kind, alignment.indices_a())
    xb, na_b = _aligned(b.storage, kind, alignment.indices_b())
    return _finish(ElementKind.LOGICAL, _COMPARISON_OPS[op](xa, xb), na_a | na_b, names)


def _truth(storage: Storage, index: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    na = storage.na[index]
    data = storage.data[index]
    if storage.kind is ElementKind.LOGICAL:
        return data & ~na, na
    if storage.kind is ElementKind.DOUBLE:
        na = na | jnp.isnan(data)
    return (data != 0) & ~na, na


def _logical(op: str, a: Vector, b: Vector, alignment: Alignment) -> Vector:
    names = _result_names(a, b, alignment.length)
    ta, na_a = _truth(a.storage, alignment.indices_a())
    tb, na_b = _truth(b.storage, alignment.indices_b())
    if op == "&":
        # A known FALSE decides the result even against NA.
        decided = (~na_a & ~ta) | (~na_b & ~tb)
        na = (na_a | na_b) & ~decided
        return _finish(ElementKind.LOGICAL, ta & tb, na, names)
    decided = ta | tb
    na = (na_a | na_b) & ~decided
    return _finish(ElementKind.LOGICAL, decided, na, names)


def binary_op(op: str, a: object, b: object) -> Vector:
    """Apply `op` pairwise over `a` and `b`, recycling the shorter operand."""
    if op in _ARITHMETIC_OPS:
        impl = _arithmetic
    elif op in _COMPARISON_OPS:
        impl = _comparison
    elif op in _LOGICAL_OPS:
        impl = _logical
    else:
        raise VectorArgumentError(f"unknown binary operator {op!r}")
    left = as_vector(a)
    right = as_vector(b)
    if impl is _arithmetic or impl is _logical:
        for operand in (left, right):
            if operand.kind is ElementKind.CHARACTER:
                raise VectorTypeError(f"non-numeric argument to binary operator {op!r}")
    alignment = align(len(left), len(right))
    alignment.emit()
    return impl(op, left, right, alignment)


def _first_names(vectors: list[Vector], length: int) -> tuple[str, ...] | None:
    for vec in vectors:
        if len(vec) == length and vec.names is not None:
            return vec.names
    return None


def elementwise_apply(fn: Callable[..., object], *vectors: object, kind: ElementKind | None = None) -> Vector:
    """Apply a scalar function to every recycled tuple of elements.

    Tuples with a missing member produce a missing result without calling
    `fn`. The result kind is `kind` when given, otherwise the highest kind
    among the returned values.
    """
    if not vectors:
        raise VectorArgumentError("elementwise_apply needs at least one vector")
    operands = [as_vector(vec) for vec in vectors]
    alignment = align_many(*(len(vec) for vec in operands))
    alignment.emit()
    columns = [vec.to_list() for vec in operands]
    outputs: list[object] = []
    for i in range(alignment.length):
        args = [column[alignment.index(k, i)] for k, column in enumerate(columns)]
        outputs.append(None if any(arg is None for arg in args) else fn(*args))
    storage = storage_from_scalars(outputs, kind, _first_names(operands, alignment.length))
    return Vector(storage)


def unary_apply(fn: Callable[[object], object], v: object, kind: ElementKind | None = None) -> Vector:
    return elementwise_apply(fn, v, kind=kind)


def _kind_of_dtype(dtype) -> ElementKind:
    if dtype == jnp.bool_:
        return ElementKind.LOGICAL
    if jnp.issubdtype(dtype, jnp.integer):
        return ElementKind.INTEGER
    if jnp.issubdtype(dtype, jnp.floating):
        return ElementKind.DOUBLE
    raise VectorTypeError(f"vectorized function returned unsupported dtype {dtype}")


def vectorized_apply(fn: Callable[[jnp.ndarray], jnp.ndarray], v: object) -> Vector:
    """Map a jax-traceable scalar function over a numeric vector with `jax.vmap`."""
    vec = as_vector(v)
    if vec.kind is ElementKind.CHARACTER:
        raise VectorTypeError("vectorized_apply requires a logical or numeric vector")
    if len(vec) == 0:
        return vec.gather((), keep_names=vec.names is not None)
    out = jax.vmap(fn)(vec.data)
    if out.shape != vec.data.shape:
        raise VectorTypeError(f"vectorized function must return one scalar per element, got shape {tuple(out.shape)}")
    return _finish(_kind_of_dtype(out.dtype), out, vec.na, vec.names)


def round_to(v: object, decimals: object = 0) -> Vector:
    """Round half away from zero to `decimals` places, recycling `decimals`."""
    vec = as_vector(v)
    digits = as_vector(decimals)
    for operand in (vec, digits):
        if operand.kind is ElementKind.CHARACTER:
            raise VectorTypeError("non-numeric argument to mathematical function")
    if len(vec) == 0:
        return Vector(vec.storage.with_kind(ElementKind.DOUBLE))
    alignment = align(len(vec), len(digits))
    alignment.emit()
    x, na_x = _aligned(vec.storage, ElementKind.DOUBLE, alignment.indices_a())
    d, na_d = _aligned(digits.storage, ElementKind.DOUBLE, alignment.indices_b())
    scale = 10.0 ** jnp.clip(jnp.trunc(d), -308, 308)
    scaled = jnp.abs(x) * scale
    # floor(scaled + 0.5) would carry 0.49999999999999994 up to 1.
    whole = jnp.floor(scaled)
    rounded = jnp.sign(x) * jnp.where(scaled - whole >= 0.5, whole + 1, whole) / scale
    # Already integral at this precision; scaling back would only add error.
    rounded = jnp.where(scaled >= 2.0**52, x, rounded)
    names = vec.names if len(vec) == alignment.length else None
    return _finish(ElementKind.DOUBLE, rounded, na_x | na_d, names)


def negate(v: object) -> Vector:
    vec = as_vector(v)
    if vec.kind is ElementKind.CHARACTER:
        raise VectorTypeError("invalid argument to unary operator '-'")
    kind = highest_kind((vec.kind, ElementKind.INTEGER))
    storage = vec.storage.with_kind(kind)
    return _finish(kind, -storage.data, storage.na, storage.names)


def logical_not(v: object) -> Vector:
    vec = as_vector(v)
    if vec.kind is ElementKind.CHARACTER:
        raise VectorTypeError("invalid argument type to '!'")
    truth, na = _truth(vec.storage, jnp.arange(len(vec), dtype=jnp.int32))
    return _finish(ElementKind.LOGICAL, ~truth, na, vec.names)
