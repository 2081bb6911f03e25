"""
Symmetric eigensolvers for 2x2 and 3x3 matrices.
"""

from .symmetric import EigenDecomposition, eigen, eigen_2x2, eigen_3x3, jacobi_eigen

__all__ = ['EigenDecomposition', 'eigen', 'eigen_2x2', 'eigen_3x3', 'jacobi_eigen']
