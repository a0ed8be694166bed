"""Session-level errors.

Both kinds are terminal for an analysis session and are never retried.
They subclass ``CLIError`` so the Azure CLI prints them as ordinary
command failures.  Malformed stream lines and extraction misses are not
errors: they show up as missing data instead.
"""

from knack.util import CLIError

# Longest response body quoted in an error message.
_MAX_MESSAGE_BODY = 2000


class IdeafyError(CLIError):
    """Base class for errors raised by the analysis session."""


class TransportError(IdeafyError):
    """The byte stream could not be opened or broke before completion."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(
            "Network error: request was blocked before reaching the server "
            f"or the connection dropped. ({detail})"
        )


class UpstreamStatusError(IdeafyError):
    """The analysis endpoint answered with a non-success status.

    ``body`` holds the response text verbatim; only the message shortens it.
    """

    def __init__(self, status_code: int, body: str = "", reason: str = ""):
        self.status_code = status_code
        self.body = body
        self.reason = reason
        detail = body or reason
        if len(detail) > _MAX_MESSAGE_BODY:
            detail = detail[:_MAX_MESSAGE_BODY] + "..."
        super().__init__(f"API error {status_code}: {detail}")
