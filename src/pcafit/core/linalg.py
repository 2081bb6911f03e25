"""
Fixed-size linear algebra helpers.

The fitting engine only ever needs 2x2 and 3x3 symmetric matrices and
2D/3D vectors, so everything here works on small numpy arrays and has
no side effects.
"""

import numpy as np

from ..config import EPS


SUPPORTED_DIMENSIONS = (2, 3)


def as_coordinates(values, name: str = "point") -> np.ndarray:
    """
    Convert coordinates to a float64 vector of dimension 2 or 3.

    Parameters
    ----------
    values : array_like
        Coordinates of shape (2,) or (3,).
    name : str
        Used in error messages.

    Returns
    -------
    np.ndarray
        Read-only copy of shape (d,).
    """
    vector = np.array(values, dtype=np.float64)

    if vector.ndim != 1 or vector.shape[0] not in SUPPORTED_DIMENSIONS:
        raise ValueError(f"Expected {name} of shape (2,) or (3,), got {vector.shape}")

    if not np.all(np.isfinite(vector)):
        raise ValueError(f"{name} has non-finite coordinates: {vector}")

    vector.setflags(write=False)
    return vector


def check_square(matrix, name: str = "matrix") -> np.ndarray:
    """Return ``matrix`` as a float64 array, checking it is 2x2 or 3x3."""
    matrix = np.asarray(matrix, dtype=np.float64)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1] \
            or matrix.shape[0] not in SUPPORTED_DIMENSIONS:
        raise ValueError(f"Expected {name} of shape (2, 2) or (3, 3), got {matrix.shape}")

    return matrix


def symmetrize(matrix: np.ndarray) -> np.ndarray:
    """Return (M + M^T) / 2."""
    return 0.5 * (matrix + matrix.T)


def is_finite(*arrays) -> bool:
    """True when every entry of every array is finite."""
    return all(np.all(np.isfinite(a)) for a in arrays)


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Scale a vector to unit length.

    Raises
    ------
    ValueError
        If the vector has (numerically) zero length.
    """
    vector = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(vector)
    if norm < EPS:
        raise ValueError(f"Cannot normalize zero-length vector {vector}")
    return vector / norm


def canonical_sign(vector: np.ndarray) -> np.ndarray:
    """Flip a vector so that its largest-magnitude component is positive."""
    index = int(np.argmax(np.abs(vector)))
    if vector[index] < 0:
        return -vector
    return vector


def perpendicular_2d(vector: np.ndarray) -> np.ndarray:
    """Rotate a 2D vector by +90 degrees."""
    return np.array([-vector[1], vector[0]])


def triangle_measure(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    """
    Area of a triangle in 2D or 3D.

    Uses half the magnitude of the cross product of two edge vectors.
    """
    u = b - a
    v = c - a
    if a.shape[0] == 2:
        return 0.5 * abs(u[0] * v[1] - u[1] * v[0])
    return 0.5 * float(np.linalg.norm(np.cross(u, v)))


def tetrahedron_measure(a, b, c, d) -> float:
    """Volume of a tetrahedron (|det| / 6)."""
    return abs(float(np.linalg.det(np.column_stack([b - a, c - a, d - a])))) / 6.0


def complete_basis(fixed, dimension: int, tol: float = 1e-8) -> np.ndarray:
    """
    Extend orthonormal vectors to an orthonormal basis.

    Canonical axes e1, e2, ... are tried in order; each is orthogonalized
    against the vectors already in the basis (Gram-Schmidt) and kept if
    its remainder is not negligible. The result is deterministic for a
    given input.

    Parameters
    ----------
    fixed : list of np.ndarray
        Orthonormal vectors to keep as the first columns.
    dimension : int
        Ambient dimension.
    tol : float
        Minimum remainder norm for an axis to be accepted.

    Returns
    -------
    np.ndarray
        Matrix of shape (dimension, dimension) with orthonormal columns.
    """
    basis = [np.asarray(v, dtype=np.float64) for v in fixed]

    for axis in np.eye(dimension):
        if len(basis) == dimension:
            break
        remainder = axis.copy()
        for v in basis:
            remainder -= np.dot(remainder, v) * v
        norm = np.linalg.norm(remainder)
        if norm > tol:
            basis.append(remainder / norm)

    return np.column_stack(basis)


def orthonormality_error(vectors: np.ndarray) -> float:
    """Max deviation of V^T V from the identity."""
    d = vectors.shape[1]
    return float(np.max(np.abs(vectors.T @ vectors - np.eye(d))))
