# errors.py
"""
Failure kinds raised by the price pipeline.

Every error is terminal for the call that raised it. Callers decide whether
to retry the whole pipeline or fall back to another oracle.
"""


class PriceOracleError(Exception):
    """Base class for every pipeline failure."""

    kind = "error"


class RequestConstructionError(PriceOracleError):
    kind = "request_construction"


class TransportError(PriceOracleError):
    kind = "transport"


class MalformedResponseError(PriceOracleError):
    kind = "malformed_response"


class InvalidShapeError(PriceOracleError):
    kind = "invalid_shape"


class InvalidFieldError(PriceOracleError):
    kind = "invalid_field"


class ComputationError(PriceOracleError):
    kind = "computation"


class FormattingError(PriceOracleError):
    kind = "formatting"
