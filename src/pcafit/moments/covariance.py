"""
Covariance assembly.

Moments of all primitives are summed about the origin in a single pass,
then moved to the centroid with the parallel-axis theorem:

    C = sum(M_k) - W c c^T,   c = sum(w_k c_k) / W

Accumulated sums are immutable values that add associatively, so a
primitive sequence can be split into partitions, accumulated in parallel
and merged.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..config import resolve_config
from ..core.errors import EmptyInputError, NumericInstabilityError
from ..core.linalg import is_finite, symmetrize
from ..core.primitives import Primitive, decompose
from .accumulator import check_primitive, moment_of


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class MomentSum:
    """
    Accumulated mass and moments of a primitive set.

    Attributes
    ----------
    total_weight : float
        Sum of primitive weights.
    first_moment : np.ndarray
        Sum of weight * centroid, shape (d,).
    raw_moment : np.ndarray
        Sum of second-order moments about the origin, shape (d, d).
    count : int
        Number of primitives accumulated.
    """
    total_weight: float
    first_moment: np.ndarray
    raw_moment: np.ndarray
    count: int = 0

    @classmethod
    def zero(cls, dimension: int) -> 'MomentSum':
        """Neutral element for ``+`` in the given dimension."""
        return cls(0.0, np.zeros(dimension), np.zeros((dimension, dimension)), 0)

    @classmethod
    def of(cls, primitive: Primitive, config=None) -> 'MomentSum':
        """Moment sum of a single primitive."""
        weight, first, raw = moment_of(primitive, config)
        return cls(weight, first, raw, 1)

    @property
    def dimension(self) -> int:
        return self.first_moment.shape[0]

    def __add__(self, other: 'MomentSum') -> 'MomentSum':
        if not isinstance(other, MomentSum):
            return NotImplemented
        if other.dimension != self.dimension:
            raise ValueError(
                f"Cannot merge {self.dimension}D and {other.dimension}D moment sums"
            )
        return MomentSum(
            self.total_weight + other.total_weight,
            self.first_moment + other.first_moment,
            self.raw_moment + other.raw_moment,
            self.count + other.count,
        )

    def centroid(self) -> np.ndarray:
        """Weight-averaged position."""
        if not self.total_weight > 0:
            raise EmptyInputError(
                f"Total weight must be positive, got {self.total_weight} "
                f"over {self.count} primitives"
            )
        return self.first_moment / self.total_weight

    def covariance(self) -> np.ndarray:
        """Second moment about the centroid (parallel-axis theorem), symmetrized."""
        c = self.centroid()
        return symmetrize(self.raw_moment - self.total_weight * np.outer(c, c))


def _ambient_dimension(primitives: Sequence[Primitive]) -> int:
    dims = {p.ambient_dimension for p in primitives}
    if len(dims) != 1:
        raise ValueError(f"Primitives mix ambient dimensions {sorted(dims)}")
    return dims.pop()


def prepare(primitives: Iterable[Primitive], dimension: Optional[int] = None,
            config=None) -> List[Primitive]:
    """
    Validate a primitive set and decompose it to the requested dimension.

    Validation happens here once: every input primitive must be
    non-degenerate and all must share one ambient dimension.

    Parameters
    ----------
    primitives : iterable of Primitive
        Input set; materialized once.
    dimension : int, optional
        Dimension tag. None keeps every primitive at its own dimension.
    config : FitConfig, optional
        Tolerances.

    Returns
    -------
    list of Primitive
        Primitives to integrate.

    Raises
    ------
    EmptyInputError
        If the input is empty.
    DegeneratePrimitiveError
        If any primitive has no extent.
    """
    config = resolve_config(config)
    primitives = list(primitives)

    if not primitives:
        raise EmptyInputError("Cannot fit an empty primitive set")

    _ambient_dimension(primitives)

    if dimension is not None and dimension not in (0, 1, 2, 3):
        raise ValueError(f"dimension must be 0, 1, 2 or 3, got {dimension}")

    for primitive in primitives:
        check_primitive(primitive, config.degeneracy_eps)

    pieces = []
    for primitive in primitives:
        pieces.extend(decompose(primitive, dimension))

    logger.debug("Prepared %d primitives as %d pieces (dimension tag %s)",
                 len(primitives), len(pieces), dimension)
    return pieces


def accumulate(primitives: Iterable[Primitive], config=None) -> MomentSum:
    """
    Fold primitive moments into one MomentSum.

    Parameters
    ----------
    primitives : iterable of Primitive
        Non-empty set sharing one ambient dimension.
    config : FitConfig, optional
        Tolerances.

    Returns
    -------
    MomentSum
    """
    primitives = list(primitives)
    if not primitives:
        raise EmptyInputError("Cannot accumulate an empty primitive set")

    d = _ambient_dimension(primitives)
    return reduce(lambda acc, p: acc + MomentSum.of(p, config), primitives, MomentSum.zero(d))


def merge(*sums: MomentSum) -> MomentSum:
    """Merge partial sums (e.g. from separate partitions)."""
    if not sums:
        raise EmptyInputError("Nothing to merge")
    return reduce(lambda a, b: a + b, sums)


def accumulate_partitioned(primitives: Iterable[Primitive], n_partitions: int = 4,
                           max_workers: Optional[int] = None, config=None) -> MomentSum:
    """
    Accumulate moments of contiguous partitions in a thread pool and merge them.

    The result matches ``accumulate`` up to floating-point rounding.

    Parameters
    ----------
    primitives : iterable of Primitive
        Non-empty set sharing one ambient dimension.
    n_partitions : int
        Number of partitions. Default 4.
    max_workers : int, optional
        Thread pool size. Defaults to the executor's choice.
    config : FitConfig, optional
        Tolerances.

    Returns
    -------
    MomentSum
    """
    if n_partitions < 1:
        raise ValueError(f"n_partitions must be >= 1, got {n_partitions}")

    primitives = list(primitives)
    if not primitives:
        raise EmptyInputError("Cannot accumulate an empty primitive set")
    _ambient_dimension(primitives)

    bounds = np.linspace(0, len(primitives), min(n_partitions, len(primitives)) + 1).astype(int)
    chunks = [primitives[lo:hi] for lo, hi in zip(bounds[:-1], bounds[1:])]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        partials = list(executor.map(lambda chunk: accumulate(chunk, config), chunks))

    return merge(*partials)


def build_covariance(primitives: Iterable[Primitive], dimension: Optional[int] = None,
                     config=None) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Centroid and covariance of a primitive set.

    Parameters
    ----------
    primitives : iterable of Primitive
        Non-empty set sharing one ambient dimension.
    dimension : int, optional
        Dimension tag (see ``decompose``).
    config : FitConfig, optional
        Tolerances.

    Returns
    -------
    centroid : np.ndarray
        Shape (d,).
    covariance : np.ndarray
        Symmetric positive semi-definite matrix of shape (d, d).
    total_weight : float
        Total mass.

    Raises
    ------
    EmptyInputError
        Empty input or zero total weight.
    DegeneratePrimitiveError
        A primitive has zero length, area or volume.
    NumericInstabilityError
        Non-finite centroid or covariance.
    """
    pieces = prepare(primitives, dimension, config)
    sums = accumulate(pieces, config)

    centroid = sums.centroid()
    covariance = sums.covariance()

    if not is_finite(centroid, covariance):
        raise NumericInstabilityError(
            f"Non-finite covariance from {sums.count} primitives "
            f"(total weight {sums.total_weight})"
        )

    logger.debug("Accumulated %d pieces: total weight %.6g, centroid %s",
                 sums.count, sums.total_weight, centroid)
    return centroid, covariance, sums.total_weight
