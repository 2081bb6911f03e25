"""
Moment integration and covariance assembly.
"""

from .accumulator import MomentContribution, moment_of
from .covariance import MomentSum, accumulate, accumulate_partitioned, build_covariance, merge

__all__ = [
    'MomentContribution',
    'moment_of',
    'MomentSum',
    'accumulate',
    'accumulate_partitioned',
    'build_covariance',
    'merge',
]
