"""HTTP transport for DepHealth."""

from .client import FetchClient, FetchResponse

__all__ = [
    "FetchClient",
    "FetchResponse",
]
