"""Error types."""


class GirError(Exception):
    """Base class for gir errors."""


class ConfigurationError(GirError, ValueError):
    """A configured URL prefix could not be parsed."""

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f'invalid URL "{value}": {reason}')


class RequestResolutionError(GirError, ValueError):
    """A redirect URL could not be built for a request.

    The message is sent verbatim to the client as a 400 response body.
    """

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f'parse "{reference}": {reason}')
