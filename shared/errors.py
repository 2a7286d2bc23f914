"""Error types shared by the Paperless client and the note-link services."""


class TransportError(Exception):
    """Raised when a request to the document server fails.

    Covers both non-success HTTP responses and network faults. For network
    faults ``status_code`` is None and ``body`` carries the underlying error text.
    """

    def __init__(self, url: str, status_code: int | None = None, body: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Request to {url} failed: {body}"
        else:
            message = f"Request to {url} failed with status {status_code}"
        super().__init__(message)


class ConfigurationError(Exception):
    """Raised when a required setting is malformed, e.g. an unusable base URL."""
