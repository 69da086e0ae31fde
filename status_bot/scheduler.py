import math
import threading
import time

from .logging_setup import logger


def next_tick(now: float, interval_seconds: int) -> float:
    """Next wall-clock multiple of the interval strictly after ``now`` (cron ``*/N`` semantics)."""
    return (math.floor(now / interval_seconds) + 1) * interval_seconds


class Ticker:
    """Fires ``callback`` on every interval boundary until stopped.

    Each firing runs on its own daemon thread, so a slow callback never delays
    later ticks; overlapping runs are the callback's business.
    """

    def __init__(self, interval_seconds: int, callback, *, initial_delay: float = 5, clock=time.time):
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.initial_delay = initial_delay
        self._clock = clock
        self._stop = threading.Event()
        self.fired = 0

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _fire(self) -> threading.Thread:
        self.fired += 1
        worker = threading.Thread(target=self.callback, name=f"cycle-{self.fired}", daemon=True)
        worker.start()
        return worker

    def run(self) -> None:
        """Block until stop() is called."""
        if self._stop.wait(self.initial_delay):
            return
        self._fire()
        while not self._stop.is_set():
            delay = max(0.0, next_tick(self._clock(), self.interval_seconds) - self._clock())
            if self._stop.wait(delay):
                break
            self._fire()
        logger.info("[SCHEDULER] Stopped after %s tick(s)", self.fired)
