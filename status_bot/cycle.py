import threading
import time
from dataclasses import dataclass

from .delivery import DeliveryEngine, DeliveryResult
from .errors import FetchError
from .fetcher import ServerFetcher
from .logging_setup import logger
from .render import CardStyle, capacity_percent, render_error, render_status

ERROR_NOTIFY_THRESHOLD = 3


@dataclass
class CycleState:
    is_running: bool = False
    consecutive_fetch_errors: int = 0
    last_success_timestamp: float | None = None
    last_player_count: int | None = None


class CycleController:
    """Runs one fetch -> render -> deliver pass per trigger, never two at once.

    A trigger that arrives while a cycle is running is dropped, not queued.
    """

    def __init__(self, fetcher: ServerFetcher, engine: DeliveryEngine, destinations, refresh_interval_seconds: int, *,
                 error_threshold: int = ERROR_NOTIFY_THRESHOLD, style: CardStyle | None = None,
                 state: CycleState | None = None, clock=time.time):
        self.fetcher = fetcher
        self.engine = engine
        self.destinations = list(destinations)
        self.refresh_interval_seconds = refresh_interval_seconds
        self.error_threshold = error_threshold
        self.style = style or CardStyle()
        self.state = state or CycleState()
        self._clock = clock
        self._flag_lock = threading.Lock()

    def _enter(self) -> bool:
        with self._flag_lock:
            if self.state.is_running:
                return False
            self.state.is_running = True
            return True

    def trigger(self) -> DeliveryResult | None:
        """Run a cycle unless one is already in flight. Returns the delivery result, or None if nothing was delivered."""
        if not self._enter():
            logger.info("[CYCLE] Previous check still running, skipping...")
            return None
        try:
            return self._run()
        except Exception:
            logger.exception("[CYCLE] Server check failed unexpectedly")
            return None
        finally:
            self.state.is_running = False

    def _run(self) -> DeliveryResult | None:
        logger.info("[CYCLE] Starting server check...")
        try:
            server = self.fetcher.fetch()
        except FetchError as e:
            self.state.consecutive_fetch_errors = self.fetcher.consecutive_errors
            logger.error("[CYCLE] Server check failed (%s consecutive): %s", self.state.consecutive_fetch_errors, e)
            if self.state.consecutive_fetch_errors >= self.error_threshold:
                result = self.engine.deliver(self.destinations, render_error(e, self.state.consecutive_fetch_errors, now=self._clock()))
                logger.info("[CYCLE] Error notification sent to %s/%s webhooks", result.success_count, result.total_count)
                return result
            return None
        self.state.consecutive_fetch_errors = self.fetcher.consecutive_errors

        bots = f", {server.bot_count} bots" if server.bot_count > 0 else ""
        logger.info("[CYCLE] Server status: %s/%s players (%s%%)%s", server.human_count, server.max_capacity,
                    capacity_percent(server.human_count, server.max_capacity), bots)

        now = self._clock()
        embed = render_status(server, self.refresh_interval_seconds, now=now, style=self.style)
        result = self.engine.deliver(self.destinations, embed)
        if result.ok:
            self.state.last_success_timestamp = now
            logger.info("[CYCLE] Embed sent: %s",
                        "Server empty" if server.human_count == 0 else f"{server.human_count} players online")
        self.state.last_player_count = server.human_count
        return result
