"""Domain-specific exceptions for the sales analytics engine.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SalesAPIError for easy catching.

Data-quality problems inside sale records (missing amounts, unparsable
dates, empty collections) are never raised: they have defined zero/None
results. Only caller mistakes and malformed payloads raise.
"""


class SalesAPIError(Exception):
    """Base exception for all sales analytics errors.

    Users can catch this exception to handle any error raised by the package.
    """

    pass


class ConfigError(SalesAPIError, ValueError):
    """Raised when a caller passes an invalid parameter or configuration.

    This exception is raised when:
    - An unknown period, sort order or tie-break value is provided
    - A target year is not a positive integer
    - A windowed period is requested without an explicit ``now``
    - AnalyticsConfig values fail validation
    """

    pass


class DataQualityError(SalesAPIError):
    """Raised when input data does not have the expected structure.

    This exception is raised when:
    - A sales frame is missing required columns
    """

    pass


class PayloadError(DataQualityError):
    """Raised when an API response is not a successful sales payload.

    This exception is raised when:
    - The ``success`` flag is false
    - The ``data`` or ``data.sales`` keys are missing
    """

    pass
