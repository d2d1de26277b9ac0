"""atomvec public API."""

from .errors import (
    CoercionWarning,
    IncompatibleLengthError,
    IntegerOverflowWarning,
    InvalidStepError,
    MixedSignIndexError,
    RecycleLengthWarning,
    VectorArgumentError,
    VectorError,
    VectorIndexError,
    VectorLengthError,
    VectorTypeError,
    VectorWarning,
)
from .lattice import (
    NA,
    NA_CHARACTER,
    NA_INTEGER,
    NA_REAL,
    ElementKind,
    Missing,
    cast,
    coerce,
    highest_kind,
    rank_of,
)
from .values import (
    Vector,
    as_kind,
    as_vector,
    combine,
    identical,
    is_na,
    length,
    names,
    repeat,
    sequence,
    set_names,
)
from .recycling import Alignment, align, align_many, recycle_to
from .indexing import IndexMode, Resolution, extract, resolve, resolve_for_write
from .mutation import assign
from .ops import (
    binary_op,
    elementwise_apply,
    logical_not,
    negate,
    round_to,
    unary_apply,
    vectorized_apply,
)

__version__ = "0.1.0"

__all__ = [
    "NA",
    "NA_INTEGER",
    "NA_REAL",
    "NA_CHARACTER",
    "ElementKind",
    "Missing",
    "coerce",
    "cast",
    "rank_of",
    "highest_kind",
    "Vector",
    "as_vector",
    "combine",
    "sequence",
    "repeat",
    "length",
    "names",
    "set_names",
    "is_na",
    "identical",
    "as_kind",
    "Alignment",
    "align",
    "align_many",
    "recycle_to",
    "IndexMode",
    "Resolution",
    "resolve",
    "resolve_for_write",
    "extract",
    "assign",
    "binary_op",
    "unary_apply",
    "elementwise_apply",
    "vectorized_apply",
    "round_to",
    "negate",
    "logical_not",
    "VectorError",
    "VectorIndexError",
    "MixedSignIndexError",
    "VectorLengthError",
    "IncompatibleLengthError",
    "VectorTypeError",
    "VectorArgumentError",
    "InvalidStepError",
    "VectorWarning",
    "RecycleLengthWarning",
    "IntegerOverflowWarning",
    "CoercionWarning",
]
