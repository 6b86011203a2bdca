"""
Cooperative cancellation for long-running searches.

A signal handler may fire at any point inside a backend's fit call, so the
handler only flips a flag. The search loop checks the flag at pass boundaries
and aborts with SearchCancelledError.
"""

import contextlib
import logging
import signal
import threading
from typing import Iterable, Optional

from utils.exceptions import SearchCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SearchCancelledError(f"Search aborted: {self.reason}")


@contextlib.contextmanager
def cancellation_hook(token: CancellationToken,
                      signals: Iterable[int] = (signal.SIGTERM,),
                      logger: Optional[logging.Logger] = None):
    """
    Route the given signals to ``token.cancel`` for the lifetime of the block.

    Previous handlers are restored on every exit path. Signal handlers can only
    be installed from the main thread; elsewhere the token still works when
    cancelled programmatically.
    """
    logger = logger or logging.getLogger(__name__)
    previous = {}

    def _handler(signum, frame):
        # No logging or allocation-heavy work here: just flip the flag.
        token.cancel(f"received signal {signum}")

    if threading.current_thread() is threading.main_thread():
        for signum in signals:
            previous[signum] = signal.signal(signum, _handler)
    else:
        logger.debug("Not on the main thread; signal-based cancellation disabled for this search.")

    try:
        yield token
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
