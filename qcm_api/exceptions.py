"""Custom exceptions for quiz API errors."""


class QcmAPIError(Exception):
    """Base exception for quiz provider/checker errors."""
    pass


class NetworkError(QcmAPIError):
    """Connection failure, timeout or non-success HTTP status."""
    pass


class InvalidResponseError(QcmAPIError):
    """API returned unexpected response format."""
    pass
