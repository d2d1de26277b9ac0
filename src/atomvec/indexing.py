"""Index resolution for positional, exclusion, mask, and name subscripts."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from .errors import MixedSignIndexError
from .lattice import ElementKind
from .values import Vector, as_vector


# Position of a slot addressed by a missing subscript (NA index or NA mask entry).
MISSING_SLOT = -1


class IndexMode(str, Enum):
    ALL = "all"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MASK = "mask"
    NAME = "name"


@dataclass(frozen=True)
class Resolution:
    """Ordered 0-based target positions for one index spec.

    Positions at or beyond the vector length address missing slots on read
    and trigger growth on write. `MISSING_SLOT` marks subscripts that were
    themselves missing. `new_names` maps slots created for unmatched names
    (write mode only) to their name.
    """

    mode: IndexMode
    positions: tuple[int, ...]
    max_position: int = 0
    new_names: dict[int, str] = field(default_factory=dict)

    @property
    def has_missing_slot(self) -> bool:
        return MISSING_SLOT in self.positions


def _classify(spec: Vector) -> IndexMode:
    if spec.kind is ElementKind.LOGICAL:
        return IndexMode.MASK
    if spec.kind is ElementKind.CHARACTER:
        return IndexMode.NAME
    return IndexMode.POSITIVE


def _whole(value: object) -> int | None:
    if value is None:
        return None
    real = float(value)
    if not math.isfinite(real):
        return None
    return int(real)


def _resolve_numeric(n: int, spec: Vector) -> tuple[IndexMode, tuple[int, ...]]:
    subscripts = [_whole(item) for item in spec.to_list()]
    positive = tuple(p for p in subscripts if p is not None and p > 0)
    negative = tuple(p for p in subscripts if p is not None and p < 0)
    has_missing = any(p is None for p in subscripts)

    if negative:
        if positive or has_missing:
            raise MixedSignIndexError(positive=positive, negative=negative, has_missing=has_missing)
        excluded = {-p - 1 for p in negative}
        return IndexMode.NEGATIVE, tuple(i for i in range(n) if i not in excluded)

    return IndexMode.POSITIVE, tuple(MISSING_SLOT if p is None else p - 1 for p in subscripts if p != 0)


def _resolve_mask(n: int, spec: Vector) -> tuple[int, ...]:
    flags = spec.to_list()
    m = len(flags)
    if m == 0:
        return ()
    positions: list[int] = []
    for i in range(max(n, m)):
        flag = flags[i % m]
        if flag is None:
            positions.append(MISSING_SLOT)
        elif flag:
            positions.append(i)
    return tuple(positions)


def _resolve_names(v: Vector, spec: Vector, *, for_write: bool) -> tuple[tuple[int, ...], dict[int, str]]:
    n = len(v)
    positions: list[int] = []
    new_names: dict[int, str] = {}
    pending: dict[str, int] = {}
    for name in spec.to_list():
        found = None if name is None else v.first_position(name)
        if found is not None:
            positions.append(found)
            continue
        if not for_write or not name:
            positions.append(MISSING_SLOT if for_write else n)
            continue
        if name not in pending:
            pending[name] = n + len(pending)
            new_names[pending[name]] = name
        positions.append(pending[name])
    return tuple(positions), new_names


def resolve(v: Vector, spec: object, *, for_write: bool = False) -> Resolution:
    """Resolve `spec` against `v`; `None` addresses every position."""
    n = len(v)
    if spec is None:
        return Resolution(mode=IndexMode.ALL, positions=tuple(range(n)), max_position=n)

    subscript = as_vector(spec)
    mode = _classify(subscript)
    new_names: dict[int, str] = {}
    if mode is IndexMode.MASK:
        positions = _resolve_mask(n, subscript)
    elif mode is IndexMode.NAME:
        positions, new_names = _resolve_names(v, subscript, for_write=for_write)
    else:
        mode, positions = _resolve_numeric(n, subscript)

    max_position = max((p + 1 for p in positions if p != MISSING_SLOT), default=0)
    return Resolution(mode=mode, positions=positions, max_position=max_position, new_names=new_names)


def resolve_for_write(v: Vector, spec: object) -> Resolution:
    return resolve(v, spec, for_write=True)


def extract(v: object, spec: object = None) -> Vector:
    """Read the elements addressed by `spec` into a new vector, in spec order."""
    vec = as_vector(v)
    resolution = resolve(vec, spec)
    keep_names = vec.names is not None or resolution.mode is IndexMode.NAME
    return vec.gather(resolution.positions, keep_names=keep_names)
