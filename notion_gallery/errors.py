"""Error taxonomy surfaced by the feed service."""


class FeedError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500


class ValidationError(FeedError):
    """Raised when a required request parameter is missing or malformed."""

    status_code = 400


class AccessDenied(FeedError):
    """Raised when a database id is not on the configured allow-list."""

    status_code = 403


class UpstreamError(FeedError):
    """Raised when the external database query fails."""

    status_code = 500
