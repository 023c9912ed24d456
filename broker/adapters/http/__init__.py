"""HTTP adapter layer - abstracts over the upstream transport."""

from broker.adapters.http.base import AbstractHTTPClient, HTTPResponse
from broker.adapters.http.httpx_client import HttpxClient

__all__ = [
    "AbstractHTTPClient",
    "HTTPResponse",
    "HttpxClient",
]
