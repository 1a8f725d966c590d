class YokiDropError(Exception):
    """Base class for every error raised by yoki_drops."""


class NetworkError(YokiDropError):
    """Request to an indexer or the ACS API failed. Safe to retry."""

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(YokiDropError):
    """Indexer answered, but not with the shape we query for."""


class MalformedEventError(YokiDropError):
    """A single transfer could not be parsed (quantity, token id or timestamp)."""


class ConfigurationError(YokiDropError, ValueError):
    """Missing secret or setting. Raised before any work starts."""
