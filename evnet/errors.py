"""
Errors raised while resolving route geometries and loading configuration.
"""


class RoutingError(Exception):
    """
    Base class for failures reported by the directions service client.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransientRoutingFailure(RoutingError):
    """
    Server error, timeout or network failure. Worth retrying after a pause.
    """


class RateLimitedError(TransientRoutingFailure):
    """
    HTTP 429 from the directions service. Retried with exponential backoff.
    """


class PermanentRoutingFailure(RoutingError):
    """
    The request can never succeed as issued: malformed request, rejected
    credential, or no drivable route between the two points.
    """


class ConfigurationError(RuntimeError):
    """
    A required credential or endpoint for live route resolution is missing.
    """
