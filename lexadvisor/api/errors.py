"""
Exception taxonomy of the application.

Completion errors carry the text shown to the user (``user_message``) and the
HTTP status the route relays, so the chat view and the SSE endpoint render
them without further classification.
"""


class LexAdvisorError(Exception):
    """Base class for all application errors."""


class CompletionError(LexAdvisorError):
    """
    The completion endpoint could not deliver a reply.

    Attributes
    ----------
    user_message : str
        Text suitable for a toast.
    status_code : int
        HTTP status relayed to the frontend.
    """

    user_message = "Failed to get response"
    status_code = 502

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.user_message)
        self.detail = detail


class RateLimitedError(CompletionError):
    user_message = "Rate limit exceeded. Please try again later."
    status_code = 429


class PaymentRequiredError(CompletionError):
    user_message = "Payment required. Please add credits to continue."
    status_code = 402


class CompletionRequestError(CompletionError):
    """Any other non-success status, or a transport failure."""


class StorageError(LexAdvisorError):
    """The document bucket refused or failed an operation."""


class AuthError(LexAdvisorError):
    """Sign-up or sign-in was rejected by the authentication provider."""


class AccessDeniedError(LexAdvisorError):
    """The signed-in user's role does not grant access to a view."""
