from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class HTTPResponse:
    """Status and raw body of a completed upstream call."""

    status_code: int
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class AbstractHTTPClient(ABC):
    """Interface for the upstream HTTP transport used by the broker."""

    @abstractmethod
    async def get(self, url: str) -> HTTPResponse:
        """Perform one GET request.

        Args:
            url: Absolute resource URL.

        Returns:
            HTTPResponse: Status code and body, whatever the status.

        Raises:
            RuntimeError: If no response was received (connection error,
                timeout, protocol error).
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections. No-op by default."""
        return None
