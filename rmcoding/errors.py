"""Exceptions raised by the coding pipeline."""


class CodingError(ValueError):
    """Base class for invalid input to the coding pipeline."""


class InvalidParameterError(CodingError):
    """Code order, degree, error probability or bit values are out of range."""


class LengthMismatchError(CodingError):
    """Stream length is not a multiple of the block length."""


class DimensionMismatchError(CodingError):
    """Matrix shape disagrees with the declared block dimensions."""
