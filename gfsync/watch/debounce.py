# gfsync Debouncer
# Collapses bursts of change notifications into a single action

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger("gfsync.watch")

DEBOUNCE_SECONDS = 0.5


class Debouncer:
    """
    Single shared timer that runs an action once a burst has settled.

    Every notify() restarts the timer. When it fires the action runs on the
    timer thread; notifications that arrive while the action is running are
    dropped, not queued.
    """

    def __init__(self, delay: float, action: Callable[[], None]):
        """
        Initialize debouncer.

        Args:
            delay: Quiet period in seconds before the action runs.
            action: Callable invoked with no arguments.
        """
        self.delay = delay
        self.action = action
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._processing = False

    @property
    def is_processing(self) -> bool:
        """Whether the action is currently running."""
        with self._lock:
            return self._processing

    @property
    def is_pending(self) -> bool:
        """Whether a timer is armed."""
        with self._lock:
            return self._timer is not None

    def notify(self) -> bool:
        """
        Record a change and (re)arm the timer.

        Returns:
            False if the notification was dropped because the action is running.
        """
        with self._lock:
            if self._processing:
                logger.debug("Action in progress, dropping notification")
                return False

            if self._timer is not None:
                self._timer.cancel()

            self._generation += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()
            return True

    def cancel(self) -> None:
        """Disarm a pending timer. A running action is not interrupted."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            # superseded by a later notify() or cancel()
            if generation != self._generation or self._processing:
                return
            self._timer = None
            self._processing = True

        try:
            self.action()
        except Exception:
            logger.exception("Debounced action failed")
        finally:
            with self._lock:
                self._processing = False
