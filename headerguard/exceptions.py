"""Exception hierarchy for the collaborators around the analysis engine.

The engine itself never raises for header input; these are raised by the
header source, the patch publisher, URL validation and the API gates.
"""


class HeaderGuardError(Exception):
    """Base class for all HeaderGuard errors."""


class InvalidURLError(HeaderGuardError, ValueError):
    """URL is malformed, uses an unsupported scheme or targets a private network."""


class HeaderFetchError(HeaderGuardError):
    """Response headers could not be fetched from the target."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class PublishError(HeaderGuardError):
    """The patch publisher failed to create the branch, commit or pull request."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(HeaderGuardError):
    """Caller exceeded its request budget."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class FixCatalogError(HeaderGuardError):
    """Rule table and canonical fix table are out of sync."""
