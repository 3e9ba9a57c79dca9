"""Custom exception hierarchy for statistics computation and store access."""


class DepotStatsError(Exception):
    """Base exception for all depot statistics errors."""

    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class StoreError(DepotStatsError):
    """Raised when the place/unit store cannot serve a request."""
    pass


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or a call times out."""
    pass


class UnknownFieldError(StoreError):
    """Raised when a unit or statistic field name is not supported."""
    pass


class ConfigurationError(DepotStatsError):
    """Raised when a bucket catalog or setting is invalid."""
    pass
