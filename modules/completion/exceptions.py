"""
Completion module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError


class UpstreamUnavailableError(ExternalServiceError):
    """Raised when every configured model failed to produce a completion.

    The last upstream error is included in the message on purpose, so the
    client can tell a rate limit from an outage.
    """

    def __init__(self, last_error: Optional[str], models: list[str]):
        super().__init__(
            "All Gemini models are currently unavailable. "
            f"Last error: {last_error or 'Unknown error'}. "
            "Please try again in a few moments.",
            service="gemini",
            code="UPSTREAM_UNAVAILABLE",
            details={"models": list(models), "last_error": last_error},
        )
