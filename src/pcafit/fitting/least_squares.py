"""
Linear least-squares fitting of lines and planes to primitive sets.

This is the main entry point: primitives are validated and decomposed
to the requested dimension, their moments are accumulated into a
covariance about the centroid, the covariance is diagonalized and the
best fitting line or plane is selected.
"""

from dataclasses import dataclass
import logging
from typing import Iterable, Optional

import numpy as np

from ..config import resolve_config
from ..core.errors import EmptyInputError
from ..core.primitives import Primitive
from ..solvers.symmetric import EigenDecomposition, eigen
from ..moments.covariance import build_covariance
from .selector import FittedPrimitive, parse_kind, select_fit


logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    """
    Container for a least-squares fit.

    Attributes
    ----------
    fit : Line or Plane
        Fitted object through the centroid.
    quality : float
        Fit quality in [0, 1]; 1 means zero orthogonal variance.
    centroid : np.ndarray
        Center of mass of the primitive set, shape (d,).
    eigen : EigenDecomposition
        Covariance eigenvalues (descending, >= 0) and eigenvectors.
    total_weight : float
        Total mass (length, area, volume or point count).
    isotropic : bool
        True when no preferred direction exists and the default
        direction was used.
    """
    fit: FittedPrimitive
    quality: float
    centroid: np.ndarray
    eigen: EigenDecomposition
    total_weight: float
    isotropic: bool = False

    @property
    def kind(self) -> str:
        return type(self.fit).__name__.lower()


def linear_least_squares_fitting(
    primitives: Iterable[Primitive],
    kind='line',
    dimension: Optional[int] = None,
    config=None
) -> FitResult:
    """
    Fit a line or plane to a set of primitives.

    Parameters
    ----------
    primitives : iterable of Primitive
        Points, segments, triangles, tetrahedra or boxes, all in 2D or all
        in 3D.
    kind : str or type
        'line' or 'plane' (3D only). Default 'line'.
    dimension : int, optional
        How to interpret the primitives as a mass distribution: 0 uses
        their vertices, 1 their edges, 2 their faces, 3 their volume.
        Must not exceed the intrinsic dimension of any primitive. None
        (default) uses each primitive as it is.
    config : FitConfig, optional
        Tolerances.

    Returns
    -------
    FitResult
        Fitted object, quality, centroid and eigendecomposition.

    Raises
    ------
    EmptyInputError
        No primitives, or zero total weight.
    DegeneratePrimitiveError
        A primitive has zero length, area or volume.
    NumericInstabilityError
        Non-finite covariance or eigendecomposition.
    ValueError
        Invalid kind or dimension, plane fit in 2D, or mixed 2D/3D input.
    """
    config = resolve_config(config)
    kind = parse_kind(kind)
    primitives = list(primitives)

    if not primitives:
        raise EmptyInputError("Cannot fit an empty primitive set")

    if kind == 'plane' and primitives[0].ambient_dimension != 3:
        raise ValueError(
            f"Plane fitting requires 3D primitives, got {primitives[0].ambient_dimension}D"
        )

    logger.debug("Fitting %s to %d primitives (dimension tag %s)",
                 kind, len(primitives), dimension)

    centroid, covariance, total_weight = build_covariance(primitives, dimension, config)
    values, vectors = eigen(covariance, config)

    # Covariance is positive semi-definite; negative values are rounding noise
    values = np.maximum(values, 0.0)

    fit, quality, isotropic = select_fit(centroid, values, vectors, kind, config)

    logger.debug("Fitted %s: quality %.6f, eigenvalues %s", kind, quality, values)

    return FitResult(
        fit=fit,
        quality=quality,
        centroid=centroid,
        eigen=EigenDecomposition(values, vectors),
        total_weight=total_weight,
        isotropic=isotropic,
    )


def fit_line(primitives: Iterable[Primitive], dimension: Optional[int] = None,
             config=None) -> FitResult:
    """Fit a line (2D or 3D). See ``linear_least_squares_fitting``."""
    return linear_least_squares_fitting(primitives, 'line', dimension, config)


def fit_plane(primitives: Iterable[Primitive], dimension: Optional[int] = None,
              config=None) -> FitResult:
    """Fit a plane (3D). See ``linear_least_squares_fitting``."""
    return linear_least_squares_fitting(primitives, 'plane', dimension, config)
