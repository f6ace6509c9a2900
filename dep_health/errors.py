"""Exceptions raised by DepHealth."""


class DepHealthError(Exception):
    """Base class for DepHealth errors."""


class NetworkError(DepHealthError):
    """An outbound request failed on every attempt."""

    def __init__(self, url: str, attempts: int, cause: BaseException) -> None:
        super().__init__(f"Request to {url} failed after {attempts} attempts: {cause}")
        self.url = url
        self.attempts = attempts
        self.cause = cause
