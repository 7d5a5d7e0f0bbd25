from __future__ import annotations
from typing import Callable, List, Optional
import threading

from artist_networth.networth.errors import ResolutionCancelled


class CancelToken:
    """One-shot cancellation flag shared by a resolution and its requests.

    Thread-safe: a slot may cancel from a web worker thread while the
    resolution runs on the board's event loop thread.
    """

    def __init__(self, label: Optional[str] = None):
        self.label = label
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            cb()

    def add_callback(self, cb: Callable[[], None]) -> Callable[[], None]:
        """Register `cb` to run on cancel; returns an unregister function.

        Runs `cb` immediately when the token is already cancelled.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(cb)
                return lambda: self._discard(cb)
        cb()
        return lambda: None

    def _discard(self, cb: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ResolutionCancelled(f"resolution cancelled: {self.label or 'unnamed'}")

    def __repr__(self) -> str:
        return f"CancelToken(label={self.label!r}, cancelled={self._cancelled})"
