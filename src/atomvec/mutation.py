"""Indexed assignment with growth and kind promotion."""

from __future__ import annotations

import logging
from dataclasses import replace

import jax.numpy as jnp

from .errors import VectorIndexError, VectorTypeError
from .indexing import MISSING_SLOT, resolve_for_write
from .lattice import highest_kind
from .recycling import recycle_to
from .values import Storage, Vector, as_vector


logger = logging.getLogger(__name__)


def _last_writes(positions: tuple[int, ...], alignment) -> dict[int, int]:
    """target position -> source index, later duplicates overriding earlier ones."""
    writes: dict[int, int] = {}
    for k, position in enumerate(positions):
        if position == MISSING_SLOT:
            continue
        writes[position] = alignment.index_b(k)
    return writes


def _scatter(target: Storage, source: Storage, writes: dict[int, int]) -> Storage:
    if not writes:
        return target
    if isinstance(target.data, tuple):
        data = list(target.data)
        na = target.na.tolist()
        source_na = source.na.tolist()
        for position, k in writes.items():
            data[position] = source.data[k]
            na[position] = source_na[k]
        return replace(target, data=tuple(data), na=jnp.asarray(na, dtype=jnp.bool_))

    # Positions are unique here, so the scatter has no ordering ambiguity.
    index = jnp.asarray(list(writes.keys()), dtype=jnp.int32)
    picks = jnp.asarray(list(writes.values()), dtype=jnp.int32)
    data = target.data.at[index].set(source.data[picks])
    na = target.na.at[index].set(source.na[picks])
    return replace(target, data=data, na=na)


def assign(v: Vector, spec: object, rhs: object) -> Vector:
    """Write `rhs` into the positions of `v` addressed by `spec`.

    Grows `v` for positions past its end and promotes its kind when `rhs`
    ranks higher. Every check runs before `v` is touched, so a failed call
    leaves it unchanged. Returns `v` itself.
    """
    if not isinstance(v, Vector):
        raise VectorTypeError(f"assignment target must be a Vector, got {type(v).__name__}")
    value = as_vector(rhs)
    resolution = resolve_for_write(v, spec)
    positions = resolution.positions
    alignment = recycle_to(len(positions), len(value))
    if not positions:
        return v
    if resolution.has_missing_slot and len(value) > 1:
        raise VectorIndexError("NA subscripts are not allowed in assignments with more than one value")
    alignment.emit()

    current = v.storage
    kind = highest_kind((current.kind, value.kind))
    needs_names = current.names is not None or bool(resolution.new_names)
    storage = current.grown(max(len(current), resolution.max_position), with_names=needs_names)
    if len(storage) > len(current):
        logger.debug("growing vector from %d to %d element(s)", len(current), len(storage))
    if kind is not current.kind:
        logger.debug("promoting vector from %s to %s", current.kind.value, kind.value)
    storage = storage.with_kind(kind)

    if resolution.new_names:
        labels = list(storage.names)
        for position, name in resolution.new_names.items():
            labels[position] = name
        storage = replace(storage, names=tuple(labels))

    incoming = value.storage.with_kind(kind)
    storage = _scatter(storage, incoming, _last_writes(positions, alignment))
    v._swap(storage)
    return v
