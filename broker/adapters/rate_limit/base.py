"""Rate window interfaces.

The request queue depends on this abstraction (not the concrete
implementation) so the timestamp store can be swapped later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateWindowStats:
    """Snapshot of a rate window.

    Attributes:
        max_requests: Requests admitted per window.
        window_seconds: Sliding window length.
        in_window: Timestamps currently inside the window.
        admitted: Total admissions since creation.
        deferred: Total admit() calls that returned a wait.
    """

    max_requests: int
    window_seconds: float
    in_window: int
    admitted: int
    deferred: int


class AbstractRateWindow(ABC):
    """Interface for outgoing request rate windows."""

    @abstractmethod
    def admit(self) -> float:
        """Try to admit one request now.

        Returns:
            0.0 when the request is admitted (and recorded). Otherwise the
            number of seconds the caller must wait before calling admit()
            again; nothing is recorded in that case.
        """
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> RateWindowStats:
        raise NotImplementedError
