from .http import HttpClient
from .rate_limiter import Pacer, RateLimitTracker
from .utils import is_valid_docket_number, set_logging_level

__all__ = [
    "HttpClient",
    "Pacer",
    "RateLimitTracker",
    "is_valid_docket_number",
    "set_logging_level",
]
