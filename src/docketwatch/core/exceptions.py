class DocketWatchError(Exception):
    """Base class for docketwatch errors."""


class FilingParsingError(DocketWatchError):
    """Raised when a raw filing breaks the source contract (e.g. no stable id)."""


class RateLimitException(DocketWatchError):
    """Raised when API rate limit is hit."""

    def __init__(self, message: str, retry_after: int = None):
        super().__init__(message)
        self.retry_after = retry_after


class StoreUnavailableError(DocketWatchError):
    """Raised when the docket store cannot be reached at all."""


class IngestionRunError(DocketWatchError):
    """
    Raised when a run cannot proceed past its own boundary.

    Carries the partial run summary so callers can still report the work that
    completed before the failure.
    """

    def __init__(self, message: str, summary=None):
        super().__init__(message)
        self.summary = summary


class InvalidDocketNumberError(DocketWatchError, ValueError):
    def __init__(self, docket_number: str):
        super().__init__(f"Invalid docket number: {docket_number!r} (expected format NN-NNN)")
        self.docket_number = docket_number


class SubscriptionLimitError(DocketWatchError):
    def __init__(self, user_id: str, tier: str, limit: int):
        super().__init__(f"User {user_id} on the {tier} tier can watch at most {limit} docket(s)")
        self.user_id = user_id
        self.tier = tier
        self.limit = limit
