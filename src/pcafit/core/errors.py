"""
Exceptions raised by the fitting engine.

The isotropic case (no preferred direction) is not an error; it yields a
valid fit with quality 0.
"""


class FittingError(ValueError):
    """Base class for all fitting failures."""
    pass


class EmptyInputError(FittingError):
    """The primitive sequence is empty or carries zero total weight."""
    pass


class DegeneratePrimitiveError(FittingError):
    """
    A primitive has zero length, area or volume.

    The whole fit aborts instead of dropping the primitive, so upstream
    data problems are not masked.

    Attributes
    ----------
    primitive : object
        The offending primitive.
    """

    def __init__(self, message: str, primitive=None):
        super().__init__(message)
        self.primitive = primitive


class NumericInstabilityError(FittingError, ArithmeticError):
    """Covariance or eigendecomposition produced non-finite or invalid values."""
    pass
