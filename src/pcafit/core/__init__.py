"""
Core types: primitives, errors and fixed-size linear algebra.
"""

from .errors import (
    FittingError,
    EmptyInputError,
    DegeneratePrimitiveError,
    NumericInstabilityError,
)
from .primitives import (
    Primitive,
    Point,
    Segment,
    Triangle,
    Tetrahedron,
    IsoBox,
    decompose,
    transform_primitive,
)

__all__ = [
    'FittingError',
    'EmptyInputError',
    'DegeneratePrimitiveError',
    'NumericInstabilityError',
    'Primitive',
    'Point',
    'Segment',
    'Triangle',
    'Tetrahedron',
    'IsoBox',
    'decompose',
    'transform_primitive',
]
