"""
Numerical tolerances and fitting configuration.

Module-level constants hold the defaults; FitConfig bundles them so a
caller can override any of them for a single fit.
"""

from dataclasses import dataclass


# Numerical tolerance for floating point comparisons
EPS = 1e-10

# Relative size below which a length/area/volume counts as zero
DEGENERACY_EPS = 1e-12

# Relative eigenvalue gap below which two eigenvalues count as equal
ISOTROPY_RTOL = 1e-9

# Relative eigenvalue gap below which the closed-form 3x3 path is not trusted
EIGEN_GAP_RTOL = 1e-6

# Fixed number of cyclic Jacobi sweeps used by the 3x3 fallback
JACOBI_SWEEPS = 8


@dataclass(frozen=True)
class FitConfig:
    """
    Tolerances used by one fit.

    Attributes
    ----------
    degeneracy_eps : float
        Relative threshold for zero length/area/volume.
    isotropy_rtol : float
        Two eigenvalues closer than ``isotropy_rtol * lambda_max`` are
        treated as equal when selecting the fit. Use 0.0 for exact equality.
    eigen_gap_rtol : float
        Relative eigenvalue gap under which the 3x3 solver switches from
        the trigonometric closed form to Jacobi sweeps.
    jacobi_sweeps : int
        Number of cyclic Jacobi sweeps in the fallback solver.
    """
    degeneracy_eps: float = DEGENERACY_EPS
    isotropy_rtol: float = ISOTROPY_RTOL
    eigen_gap_rtol: float = EIGEN_GAP_RTOL
    jacobi_sweeps: int = JACOBI_SWEEPS

    def __post_init__(self):
        for name in ('degeneracy_eps', 'isotropy_rtol', 'eigen_gap_rtol'):
            value = getattr(self, name)
            if not value >= 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if self.jacobi_sweeps < 1:
            raise ValueError(f"jacobi_sweeps must be >= 1, got {self.jacobi_sweeps}")


DEFAULT_CONFIG = FitConfig()


def resolve_config(config=None) -> FitConfig:
    """Return ``config`` or the default configuration when it is None."""
    return DEFAULT_CONFIG if config is None else config
