"""
Per-primitive second-order moments.

Every primitive contributes a mass (its length, area or volume, or the
multiplicity of a point), a first moment (mass times centroid) and a raw
second-order moment about the coordinate origin,

    M = integral over the primitive of x x^T.

Simplices use an affine map of a canonical reference moment: if T holds
the simplex vertices as columns and M0 is the moment of the reference
simplex in barycentric coordinates, then M = (measure / reference
measure) * T M0 T^T. Boxes use the closed-form integral directly.
"""

from functools import singledispatch
from typing import NamedTuple

import numpy as np

from ..config import resolve_config
from ..core.errors import DegeneratePrimitiveError
from ..core.primitives import IsoBox, Point, Primitive, Segment, Tetrahedron, Triangle


def _reference_moment(n_vertices: int) -> np.ndarray:
    """
    Barycentric second moment of the reference simplex, divided by its measure.

    For a k-simplex, the mean of lambda_i lambda_j over the simplex is
    (1 + delta_ij) / ((k + 1) (k + 2)).
    """
    k = n_vertices - 1
    return (np.ones((n_vertices, n_vertices)) + np.eye(n_vertices)) / ((k + 1) * (k + 2))


# Segment: (1/3) [[1, 1/2], [1/2, 1]]
SEGMENT_MOMENT = _reference_moment(2)
# Triangle: (1/12) [[2, 1, 1], [1, 2, 1], [1, 1, 2]]
TRIANGLE_MOMENT = _reference_moment(3)
# Tetrahedron: (1/20) [[2, 1, 1, 1], ...]
TETRAHEDRON_MOMENT = _reference_moment(4)


class MomentContribution(NamedTuple):
    """
    Mass and moments of a single primitive.

    Attributes
    ----------
    weight : float
        Length, area, volume, or point multiplicity.
    first_moment : np.ndarray
        weight * centroid, shape (d,).
    raw_moment : np.ndarray
        Second-order moment about the origin, symmetric (d, d).
    """
    weight: float
    first_moment: np.ndarray
    raw_moment: np.ndarray


def check_primitive(primitive: Primitive, eps: float) -> None:
    """
    Raise DegeneratePrimitiveError if the primitive has no extent.

    Parameters
    ----------
    primitive : Primitive
        Primitive to validate.
    eps : float
        Relative degeneracy threshold.
    """
    if primitive.is_degenerate(eps):
        raise DegeneratePrimitiveError(
            f"Degenerate {type(primitive).__name__}: measure {primitive.measure:.3e} "
            f"for size {primitive.diameter:.3e}",
            primitive=primitive,
        )


def _simplex_moment(primitive: Primitive, reference: np.ndarray) -> MomentContribution:
    measure = primitive.measure
    T = np.column_stack(primitive.vertices)
    raw = measure * (T @ reference @ T.T)
    return MomentContribution(measure, measure * primitive.centroid(), raw)


@singledispatch
def _moment(primitive) -> MomentContribution:
    raise TypeError(f"Unsupported primitive type {type(primitive).__name__}")


@_moment.register
def _(primitive: Point) -> MomentContribution:
    w = primitive.weight
    p = primitive.p
    return MomentContribution(w, w * p, w * np.outer(p, p))


@_moment.register
def _(primitive: Segment) -> MomentContribution:
    return _simplex_moment(primitive, SEGMENT_MOMENT)


@_moment.register
def _(primitive: Triangle) -> MomentContribution:
    return _simplex_moment(primitive, TRIANGLE_MOMENT)


@_moment.register
def _(primitive: Tetrahedron) -> MomentContribution:
    return _simplex_moment(primitive, TETRAHEDRON_MOMENT)


@_moment.register
def _(primitive: IsoBox) -> MomentContribution:
    volume = primitive.measure
    c = primitive.center
    h = primitive.half_extents
    # integral of x_i x_j over [c - h, c + h] = V (c_i c_j + delta_ij h_i^2 / 3)
    raw = volume * (np.outer(c, c) + np.diag(h * h / 3.0))
    return MomentContribution(volume, volume * c, raw)


def moment_of(primitive: Primitive, config=None) -> MomentContribution:
    """
    Compute the mass and moments of one primitive.

    Parameters
    ----------
    primitive : Primitive
        Point, Segment, Triangle, Tetrahedron or IsoBox.
    config : FitConfig, optional
        Supplies the degeneracy tolerance.

    Returns
    -------
    MomentContribution
        (weight, first_moment, raw_moment) about the origin.

    Raises
    ------
    DegeneratePrimitiveError
        If the primitive has zero length, area or volume.
    """
    if not isinstance(primitive, Primitive):
        raise TypeError(f"Expected a Primitive, got {type(primitive).__name__}")
    config = resolve_config(config)
    check_primitive(primitive, config.degeneracy_eps)
    return _moment(primitive)
