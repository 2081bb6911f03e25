"""
Eigendecomposition of 2x2 and 3x3 real symmetric matrices.

Closed-form solvers only: the quadratic formula in 2D and the
trigonometric solution of the characteristic cubic in 3D, with a fixed
number of cyclic Jacobi sweeps as the fallback for ill-conditioned 3x3
inputs. There is no open-ended iteration and no convergence failure.

Conventions
-----------
- Eigenvalues are sorted in descending order; ``vectors[:, i]`` belongs
  to ``values[i]``.
- Each eigenvector is oriented so its largest-magnitude component is
  positive.
- Eigenvalues equal within ``isotropy_rtol * spectral scale`` share an
  eigenspace whose basis is taken from the canonical axes e1, e2, e3 in
  order (Gram-Schmidt against the eigenvectors already fixed). A fully
  isotropic matrix returns the identity basis.
"""

import logging
from typing import NamedTuple

import numpy as np

from ..config import resolve_config
from ..core.errors import NumericInstabilityError
from ..core.linalg import (
    canonical_sign,
    check_square,
    complete_basis,
    is_finite,
    orthonormality_error,
    perpendicular_2d,
    symmetrize,
)


logger = logging.getLogger(__name__)

# Acceptance threshold for the closed-form 3x3 result, relative to the matrix scale
ACCEPT_TOL = 1e-6

# Off-diagonal entries this small relative to their diagonal pair are set to zero
NEGLIGIBLE_OFF_DIAGONAL = 1e-18


class EigenDecomposition(NamedTuple):
    """
    Eigenvalues and eigenvectors of a symmetric matrix.

    Attributes
    ----------
    values : np.ndarray
        Eigenvalues, descending, shape (d,).
    vectors : np.ndarray
        Orthonormal eigenvectors as columns, shape (d, d).
    """
    values: np.ndarray
    vectors: np.ndarray


def eigen_2x2(matrix: np.ndarray, tie_tol: float = 0.0) -> EigenDecomposition:
    """
    Closed-form eigendecomposition of a symmetric 2x2 matrix.

    Eigenvalues are ``mean +/- hypot((a - c) / 2, b)``; the principal
    direction is at angle ``atan2(2b, a - c) / 2``.
    """
    a, b, c = matrix[0, 0], matrix[0, 1], matrix[1, 1]
    mean = 0.5 * (a + c)
    radius = np.hypot(0.5 * (a - c), b)
    values = np.array([mean + radius, mean - radius])

    if 2.0 * radius <= tie_tol:
        return EigenDecomposition(values, np.eye(2))

    theta = 0.5 * np.arctan2(2.0 * b, a - c)
    v1 = canonical_sign(np.array([np.cos(theta), np.sin(theta)]))
    v2 = canonical_sign(perpendicular_2d(v1))
    return EigenDecomposition(values, np.column_stack([v1, v2]))


def _trig_eigenvalues(A: np.ndarray) -> np.ndarray:
    """Eigenvalues of a symmetric 3x3 matrix from the characteristic cubic."""
    off = A[0, 1] ** 2 + A[0, 2] ** 2 + A[1, 2] ** 2
    q = np.trace(A) / 3.0
    diag = np.diag(A) - q
    p2 = np.dot(diag, diag) + 2.0 * off
    if p2 == 0.0:
        return np.full(3, q)

    p = np.sqrt(p2 / 6.0)
    B = (A - q * np.eye(3)) / p
    r = np.clip(np.linalg.det(B) / 2.0, -1.0, 1.0)
    phi = np.arccos(r) / 3.0

    largest = q + 2.0 * p * np.cos(phi)
    smallest = q + 2.0 * p * np.cos(phi + 2.0 * np.pi / 3.0)
    middle = np.clip(3.0 * q - largest - smallest, smallest, largest)
    return np.array([largest, middle, smallest])


def _null_vector(A: np.ndarray, value: float) -> np.ndarray:
    """Unit vector spanning the kernel of A - value*I (simple eigenvalue)."""
    M = A - value * np.eye(3)
    candidates = [np.cross(M[0], M[1]), np.cross(M[0], M[2]), np.cross(M[1], M[2])]
    best = max(candidates, key=lambda v: np.dot(v, v))
    return best / np.linalg.norm(best)


def _tie_groups(values: np.ndarray, tie_tol: float):
    """Split descending eigenvalues into runs of (numerically) equal values."""
    groups = [[0]]
    for i in range(1, len(values)):
        if values[groups[-1][-1]] - values[i] <= tie_tol:
            groups[-1].append(i)
        else:
            groups.append([i])
    return groups


def _assemble(values: np.ndarray, vectors: np.ndarray, tie_tol: float) -> EigenDecomposition:
    """
    Apply the tie-break and sign conventions to a sorted decomposition.

    Eigenvectors of simple eigenvalues are kept; every multiple eigenspace
    is re-spanned from the canonical axes.
    """
    d = len(values)
    groups = _tie_groups(values, tie_tol)

    if len(groups) == 1:
        return EigenDecomposition(values, np.eye(d))

    if len(groups) < d:
        simple = [g[0] for g in groups if len(g) == 1]
        tied = [i for g in groups if len(g) > 1 for i in g]
        fixed = [vectors[:, i] for i in simple]
        basis = complete_basis(fixed, d)
        ordered = np.empty((d, d))
        for k, i in enumerate(simple):
            ordered[:, i] = basis[:, k]
        for k, i in enumerate(tied):
            ordered[:, i] = basis[:, len(simple) + k]
        vectors = ordered

    vectors = np.column_stack([canonical_sign(vectors[:, i]) for i in range(d)])
    return EigenDecomposition(values, vectors)


def jacobi_eigen(matrix: np.ndarray, sweeps: int = 8) -> EigenDecomposition:
    """
    Cyclic Jacobi rotations for a small symmetric matrix.

    Runs at most ``sweeps`` full sweeps over the off-diagonal entries;
    stops early once they vanish. Results are sorted descending but no
    tie-break convention is applied.

    Parameters
    ----------
    matrix : np.ndarray
        Symmetric matrix of shape (d, d).
    sweeps : int
        Maximum number of sweeps. Default 8.

    Returns
    -------
    EigenDecomposition
    """
    A = np.array(matrix, dtype=np.float64)
    d = A.shape[0]
    V = np.eye(d)

    for _ in range(sweeps):
        off = np.sum(np.triu(A, 1) ** 2)
        if off == 0.0:
            break
        for p in range(d - 1):
            for q in range(p + 1, d):
                apq = A[p, q]
                if abs(apq) <= NEGLIGIBLE_OFF_DIAGONAL * (abs(A[p, p]) + abs(A[q, q])):
                    # Negligible against the diagonal; keeps |tau| below 1e18
                    A[p, q] = A[q, p] = 0.0
                    continue
                tau = (A[q, q] - A[p, p]) / (2.0 * apq)
                t = np.sign(tau) / (abs(tau) + np.sqrt(1.0 + tau * tau)) if tau != 0 else 1.0
                c = 1.0 / np.sqrt(1.0 + t * t)
                s = t * c
                J = np.eye(d)
                J[p, p] = c
                J[q, q] = c
                J[p, q] = s
                J[q, p] = -s
                A = J.T @ A @ J
                V = V @ J

    values = np.diag(A).copy()
    order = np.argsort(values)[::-1]
    return EigenDecomposition(values[order], V[:, order])


def eigen_3x3(matrix: np.ndarray, tie_tol: float = 0.0, gap_rtol: float = 1e-6,
              sweeps: int = 8) -> EigenDecomposition:
    """
    Eigendecomposition of a symmetric 3x3 matrix.

    Uses the trigonometric closed form and cross products of the rows of
    ``A - lambda I`` for the eigenvectors when all eigenvalue gaps are at
    least ``gap_rtol`` (relative to the spectral scale). Near repeated
    roots the closed-form eigenvalues lose precision, so any smaller gap,
    and any closed-form result failing the orthonormality/residual check,
    is refined with ``jacobi_eigen`` before ties are decided. Only an
    exactly isotropic matrix skips refinement.
    """
    A = matrix
    scale = max(np.max(np.abs(A)), 1e-300)
    values = _trig_eigenvalues(A)

    if values[0] == values[2]:
        return EigenDecomposition(values, np.eye(3))

    gaps = -np.diff(values)
    if np.all(gaps >= gap_rtol * scale):
        vectors = np.zeros((3, 3))
        vectors[:, 0] = _null_vector(A, values[0])
        vectors[:, 2] = _null_vector(A, values[2])
        vectors[:, 1] = np.cross(vectors[:, 2], vectors[:, 0])
        result = _assemble(values, vectors, tie_tol)
        residual = np.max(np.abs(A @ result.vectors - result.vectors * result.values))
        if orthonormality_error(result.vectors) < ACCEPT_TOL and residual <= ACCEPT_TOL * scale:
            return result
        logger.warning("Closed-form 3x3 eigenvectors failed the residual check (%.3g); "
                       "using %d Jacobi sweeps", residual, sweeps)

    values, vectors = jacobi_eigen(A, sweeps)

    refined_gaps = -np.diff(values)
    if np.any((refined_gaps > tie_tol) & (refined_gaps < gap_rtol * scale)):
        logger.warning("Ill-conditioned 3x3 eigenproblem (eigenvalues %s); "
                       "resolved with %d Jacobi sweeps", values, sweeps)
    else:
        logger.debug("Repeated eigenvalues %s refined with %d Jacobi sweeps", values, sweeps)

    return _assemble(values, vectors, tie_tol)


def eigen(matrix, config=None) -> EigenDecomposition:
    """
    Eigenvalues and orthonormal eigenvectors of a symmetric 2x2 or 3x3 matrix.

    Parameters
    ----------
    matrix : array_like
        Symmetric matrix of shape (2, 2) or (3, 3). It is symmetrized
        before solving.
    config : FitConfig, optional
        Supplies the tie tolerance (``isotropy_rtol``), the closed-form
        gap threshold and the Jacobi sweep count.

    Returns
    -------
    EigenDecomposition
        Eigenvalues descending, eigenvectors as matching unit columns.

    Raises
    ------
    NumericInstabilityError
        If the matrix or the result contains NaN/Inf.
    """
    config = resolve_config(config)
    A = check_square(matrix)

    if not is_finite(A):
        raise NumericInstabilityError(f"Matrix has non-finite entries:\n{A}")

    A = symmetrize(A)
    d = A.shape[0]
    scale = np.max(np.abs(A))

    if scale == 0.0:
        return EigenDecomposition(np.zeros(d), np.eye(d))

    # Solve on the unit-scaled matrix to keep the cubic well within range
    unit = A / scale
    tie_tol = config.isotropy_rtol

    if d == 2:
        values, vectors = eigen_2x2(unit, tie_tol)
    else:
        values, vectors = eigen_3x3(unit, tie_tol, config.eigen_gap_rtol, config.jacobi_sweeps)

    values = values * scale

    if not is_finite(values, vectors):
        raise NumericInstabilityError(f"Eigendecomposition produced non-finite values: {values}")

    return EigenDecomposition(values, vectors)
