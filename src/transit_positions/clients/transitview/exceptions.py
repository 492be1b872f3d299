"""Exception hierarchy for TransitView client errors.

A base exception class with one subclass per failure stage: reaching the
feed, the feed answering with an error status, and decoding its body.
"""


class TransitViewError(Exception):
    """Base exception for all TransitView client errors."""


class TransitViewTransportError(TransitViewError):
    """The request could not be built or the feed could not be reached."""


class TransitViewHTTPError(TransitViewError):
    """The feed answered with a non-success HTTP status.

    Args:
        status_code: HTTP status code from the response.
        url: URL that was requested.

    """

    def __init__(self, status_code: int, url: str) -> None:
        """Initialize TransitView HTTP error.

        Args:
            status_code: HTTP status code from the response.
            url: URL that was requested.

        """
        super().__init__(f"[{status_code}] GET {url}")
        self.status_code = status_code
        self.url = url


class TransitViewDecodeError(TransitViewError):
    """The response body was not the expected JSON shape or types."""
