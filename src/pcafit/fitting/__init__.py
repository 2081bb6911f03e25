"""
Line and plane selection and the least-squares entry point.
"""

from .selector import Line, Plane, select_fit
from .least_squares import FitResult, linear_least_squares_fitting, fit_line, fit_plane

__all__ = [
    'Line',
    'Plane',
    'select_fit',
    'FitResult',
    'linear_least_squares_fitting',
    'fit_line',
    'fit_plane',
]
