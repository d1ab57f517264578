"""
Cooperative cancellation for scans.
"""

import threading
from typing import Optional

from ..faults import CancelledByHost


class CancellationToken:
    """
    Host-controlled abort signal.

    The engine calls ``raise_if_cancelled`` before each visit; a visit
    already in progress completes before the abort is observed.
    """

    def __init__(self):
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by host") -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self, root: Optional[str] = None) -> None:
        if self._event.is_set():
            raise CancelledByHost(root, self._reason or "cancelled by host")
