"""
Fit selection from a principal component decomposition.

A fitted line passes through the centroid along the direction of largest
variance; a fitted plane passes through the centroid with its normal
along the direction of smallest variance. The quality score compares
the variance the fit discards with the next larger one:

- line:  1 - lambda2 / lambda1
- plane: 1 - lambda3 / lambda2

1 means zero variance orthogonal to the fit, 0 means no preferred
direction (isotropic case).
"""

from dataclasses import dataclass
import logging
from typing import Optional, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

from ..config import resolve_config
from ..core.linalg import as_coordinates, complete_basis, normalize


logger = logging.getLogger(__name__)

# Fallback directions used when no direction is preferred
DEFAULT_LINE_DIRECTION = {2: np.array([1.0, 0.0]), 3: np.array([1.0, 0.0, 0.0])}
DEFAULT_PLANE_NORMAL = np.array([0.0, 0.0, 1.0])


def _as_matrix(rotation, dimension: int) -> np.ndarray:
    if rotation is None:
        return np.eye(dimension)
    if isinstance(rotation, Rotation):
        return rotation.as_matrix()
    return np.asarray(rotation, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class Line:
    """
    Infinite line through ``point`` with unit ``direction``.

    Attributes
    ----------
    point : np.ndarray
        A point on the line (the centroid for fitted lines), shape (d,).
    direction : np.ndarray
        Unit direction vector, shape (d,).
    """
    point: np.ndarray
    direction: np.ndarray

    def __post_init__(self):
        point = as_coordinates(self.point, "point")
        direction = normalize(as_coordinates(self.direction, "direction"))
        if direction.shape != point.shape:
            raise ValueError(
                f"Line point {point.shape} and direction {direction.shape} differ in dimension"
            )
        object.__setattr__(self, 'point', point)
        object.__setattr__(self, 'direction', direction)

    @property
    def dimension(self) -> int:
        return self.point.shape[0]

    def to_vector(self) -> np.ndarray:
        """Unit direction vector."""
        return self.direction.copy()

    def projection(self, q) -> np.ndarray:
        """Orthogonal projection of ``q`` onto the line."""
        q = np.asarray(q, dtype=np.float64)
        return self.point + np.dot(q - self.point, self.direction) * self.direction

    def distance(self, q) -> float:
        """Euclidean distance from ``q`` to the line."""
        q = np.asarray(q, dtype=np.float64)
        return float(np.linalg.norm(q - self.projection(q)))

    def has_on(self, q, tol: float = 1e-9) -> bool:
        """True if ``q`` is within ``tol`` of the line."""
        return self.distance(q) <= tol

    def is_parallel(self, other: 'Line', tol: float = 1e-9) -> bool:
        """True if both lines have the same direction up to sign."""
        return abs(abs(np.dot(self.direction, other.direction)) - 1.0) <= tol

    def transformed(self, rotation=None, translation=None) -> 'Line':
        """Image of the line under ``x -> R x + t``."""
        R = _as_matrix(rotation, self.dimension)
        t = np.zeros(self.dimension) if translation is None else np.asarray(translation, dtype=np.float64)
        return Line(R @ self.point + t, R @ self.direction)


@dataclass(frozen=True, eq=False)
class Plane:
    """
    Plane in 3D through ``point`` with unit ``normal``.

    Attributes
    ----------
    point : np.ndarray
        A point on the plane (the centroid for fitted planes), shape (3,).
    normal : np.ndarray
        Unit normal vector, shape (3,).
    """
    point: np.ndarray
    normal: np.ndarray

    def __post_init__(self):
        point = as_coordinates(self.point, "point")
        normal = normalize(as_coordinates(self.normal, "normal"))
        if point.shape != (3,) or normal.shape != (3,):
            raise ValueError(f"Plane requires 3D point and normal, got {point.shape} and {normal.shape}")
        object.__setattr__(self, 'point', point)
        object.__setattr__(self, 'normal', normal)

    def coefficients(self) -> Tuple[float, float, float, float]:
        """(a, b, c, d) with a x + b y + c z + d = 0 on the plane."""
        a, b, c = self.normal
        return float(a), float(b), float(c), float(-np.dot(self.normal, self.point))

    def signed_distance(self, q) -> float:
        """Distance from ``q`` to the plane, positive on the normal side."""
        q = np.asarray(q, dtype=np.float64)
        return float(np.dot(q - self.point, self.normal))

    def distance(self, q) -> float:
        return abs(self.signed_distance(q))

    def projection(self, q) -> np.ndarray:
        """Orthogonal projection of ``q`` onto the plane."""
        q = np.asarray(q, dtype=np.float64)
        return q - self.signed_distance(q) * self.normal

    def has_on(self, q, tol: float = 1e-9) -> bool:
        """True if ``q`` is within ``tol`` of the plane."""
        return self.distance(q) <= tol

    def base(self) -> Tuple[np.ndarray, np.ndarray]:
        """Two orthonormal vectors spanning the plane."""
        basis = complete_basis([self.normal], 3)
        return basis[:, 1], basis[:, 2]

    def transformed(self, rotation=None, translation=None) -> 'Plane':
        """Image of the plane under ``x -> R x + t``."""
        R = _as_matrix(rotation, 3)
        t = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        return Plane(R @ self.point + t, R @ self.normal)


FittedPrimitive = Union[Line, Plane]


def parse_kind(kind) -> str:
    """
    Normalize a fit request to ``'line'`` or ``'plane'``.

    Accepts the strings (any case) or the Line/Plane classes.
    """
    if kind is Line:
        return 'line'
    if kind is Plane:
        return 'plane'
    if isinstance(kind, str) and kind.lower() in ('line', 'plane'):
        return kind.lower()
    raise ValueError(f"kind must be 'line' or 'plane', got {kind!r}")


def _is_isotropic(numerator: float, denominator: float, largest: float, rtol: float) -> bool:
    if denominator <= 0.0:
        return True
    return denominator - numerator <= rtol * largest


def select_fit(
    centroid: np.ndarray,
    eigenvalues: np.ndarray,
    eigenvectors: np.ndarray,
    kind='line',
    config=None
) -> Tuple[FittedPrimitive, float, bool]:
    """
    Build the fitted line or plane and its quality.

    Parameters
    ----------
    centroid : np.ndarray
        Centroid of the primitive set, shape (d,).
    eigenvalues : np.ndarray
        Covariance eigenvalues sorted descending, all >= 0.
    eigenvectors : np.ndarray
        Matching unit eigenvectors as columns, shape (d, d).
    kind : str or type
        'line' or 'plane' (3D only), or the Line/Plane class.
    config : FitConfig, optional
        Supplies ``isotropy_rtol``.

    Returns
    -------
    fit : Line or Plane
        Fitted object through the centroid.
    quality : float
        Score in [0, 1].
    isotropic : bool
        True when no direction is preferred; the fit then uses the
        default direction (x axis for lines, z axis normal for planes)
        and the quality is 0.
    """
    config = resolve_config(config)
    kind = parse_kind(kind)
    centroid = np.asarray(centroid, dtype=np.float64)
    values = np.asarray(eigenvalues, dtype=np.float64)
    vectors = np.asarray(eigenvectors, dtype=np.float64)
    d = centroid.shape[0]

    if values.shape != (d,) or vectors.shape != (d, d):
        raise ValueError(
            f"Eigen data of shape {values.shape}/{vectors.shape} does not match a {d}D centroid"
        )

    if kind == 'plane' and d != 3:
        raise ValueError(f"Plane fitting requires 3D data, got {d}D")

    largest = values[0]

    if kind == 'line':
        numerator, denominator = values[1], values[0]
    else:
        numerator, denominator = values[2], values[1]

    if _is_isotropic(numerator, denominator, largest, config.isotropy_rtol):
        logger.warning("Isotropic %s fit (eigenvalues %s); using default direction", kind, values)
        if kind == 'line':
            return Line(centroid, DEFAULT_LINE_DIRECTION[d]), 0.0, True
        return Plane(centroid, DEFAULT_PLANE_NORMAL), 0.0, True

    # Orthogonal variance within the isotropy tolerance counts as zero
    if numerator <= config.isotropy_rtol * largest:
        quality = 1.0
    else:
        quality = float(np.clip(1.0 - numerator / denominator, 0.0, 1.0))

    if kind == 'line':
        fit = Line(centroid, vectors[:, 0])
    else:
        fit = Plane(centroid, vectors[:, 2])

    return fit, quality, False
