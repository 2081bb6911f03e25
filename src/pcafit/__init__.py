"""
pcafit - Linear least-squares fitting of lines and planes.

This package fits the best line or plane to a set of weighted geometric
primitives by principal component analysis of their mass-weighted
covariance:
- Points, segments, triangles, tetrahedra and axis-aligned boxes in 2D/3D
- Exact second-order moments per primitive (not just vertex samples)
- Closed-form 2x2/3x3 symmetric eigensolvers
- Fit quality score in [0, 1] with a defined isotropic fallback

Main Functions
--------------
linear_least_squares_fitting : Fit a line or plane to primitives
fit_line : Fit a line (2D or 3D)
fit_plane : Fit a plane (3D)
build_covariance : Centroid and covariance of a primitive set
eigen : Eigendecomposition of a symmetric 2x2 or 3x3 matrix

Example
-------
>>> import numpy as np
>>> from pcafit import Segment, fit_line

>>> result = fit_line([Segment([1.0, 0.0], [0.0, 0.0])])
>>> result.centroid
array([0.5, 0. ])
>>> result.quality
1.0
"""

import logging

from .config import FitConfig
from .core.errors import (
    FittingError,
    EmptyInputError,
    DegeneratePrimitiveError,
    NumericInstabilityError,
)
from .core.primitives import (
    Primitive,
    Point,
    Segment,
    Triangle,
    Tetrahedron,
    IsoBox,
    decompose,
    transform_primitive,
)
from .moments.accumulator import MomentContribution, moment_of
from .moments.covariance import (
    MomentSum,
    accumulate,
    accumulate_partitioned,
    build_covariance,
    merge,
)
from .solvers.symmetric import EigenDecomposition, eigen
from .fitting.selector import Line, Plane, select_fit
from .fitting.least_squares import FitResult, linear_least_squares_fitting, fit_line, fit_plane
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Configuration
    'FitConfig',
    'setup_logging',
    # Errors
    'FittingError',
    'EmptyInputError',
    'DegeneratePrimitiveError',
    'NumericInstabilityError',
    # Primitives
    'Primitive',
    'Point',
    'Segment',
    'Triangle',
    'Tetrahedron',
    'IsoBox',
    'decompose',
    'transform_primitive',
    # Moments
    'MomentContribution',
    'moment_of',
    'MomentSum',
    'accumulate',
    'accumulate_partitioned',
    'merge',
    'build_covariance',
    # Eigensolver
    'EigenDecomposition',
    'eigen',
    # Fitting
    'Line',
    'Plane',
    'select_fit',
    'FitResult',
    'linear_least_squares_fitting',
    'fit_line',
    'fit_plane',
]
