"""Exception hierarchy for the Wikidot AMC client.

Every error raised by this package derives from :class:`WikidotError`, so callers can
catch the whole family at once or branch on the concrete leaf.
"""

from __future__ import annotations


class WikidotError(Exception):
    """Base class for all library errors."""


class UnexpectedError(WikidotError):
    """Internal inconsistency or an unclassified failure."""


# ============================================================================
# Ajax Module Connector errors
# ============================================================================


class AMCError(WikidotError):
    """Base class for failures of the ajax-module-connector pipeline."""


class AMCHttpError(AMCError):
    """Transport or HTTP-layer failure that survived every retry."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class WikidotStatusError(AMCError):
    """The decoded response carried a terminal (or retry-exhausted) ``status``."""

    def __init__(self, message: str, status_code: str):
        super().__init__(message)
        self.status_code = status_code


class ResponseDataError(AMCError):
    """The response body was not JSON or lacked a string ``status`` field."""


# ============================================================================
# Session errors
# ============================================================================


class SessionError(WikidotError):
    """Base class for session related failures."""


class SessionCreateError(SessionError):
    """A login attempt failed."""


class LoginRequiredError(SessionError):
    """An authenticated operation was attempted without a session."""

    def __init__(self, message: str = "Login is required for this operation"):
        super().__init__(message)


# ============================================================================
# Target errors
# ============================================================================


class NotFoundError(WikidotError):
    """The requested subsite, user or resource does not exist."""


NotFoundException = NotFoundError


class TargetExistsError(WikidotError):
    """The resource being created already exists."""


class TargetError(WikidotError):
    """The target is in a state that does not allow the operation."""


class ForbiddenError(WikidotError):
    """The remote service denied the operation (``no_permission``)."""


class NoElementError(WikidotError):
    """A required element is missing from a scraped HTML fragment."""
