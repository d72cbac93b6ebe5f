"""
Exceptions raised while reading distance data and building trees.

Every error derives from PhiloError, itself a ValueError, so callers that
only care about "bad input" can catch ValueError.
"""


class PhiloError(ValueError):
    """Base class for all philo errors."""


class FieldTooLong(PhiloError):
    pass


class MalformedHeader(PhiloError):
    pass


class TooManyTaxa(PhiloError):
    pass


class TaxonNameMismatch(PhiloError):
    pass


class InvalidNumber(PhiloError):
    pass


class RowFieldCountMismatch(PhiloError):
    pass


class NonZeroDiagonal(PhiloError):
    pass


class AsymmetricMatrix(PhiloError):
    pass


class TruncatedInput(PhiloError):
    pass


class NodeCapacityExceeded(PhiloError):
    pass


class OutlierNotFound(PhiloError):
    pass


class InvalidArguments(PhiloError):
    pass


__all__ = [
    "PhiloError",
    "FieldTooLong",
    "MalformedHeader",
    "TooManyTaxa",
    "TaxonNameMismatch",
    "InvalidNumber",
    "RowFieldCountMismatch",
    "NonZeroDiagonal",
    "AsymmetricMatrix",
    "TruncatedInput",
    "NodeCapacityExceeded",
    "OutlierNotFound",
    "InvalidArguments",
]
