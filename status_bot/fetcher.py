import time

import requests

from . import httpclient
from .errors import FetchError
from .logging_setup import logger
from .models import RemoteState


class ServerFetcher:
    """Reads the status endpoint with bounded retry.

    ``consecutive_errors`` counts back-to-back exhausted fetches and is reset
    by any successful one.
    """

    def __init__(self, api_url: str, *, max_retries: int = 3, retry_delay: float = 30, timeout: float = 15,
                 session: requests.Session | None = None, sleep=time.sleep):
        self.api_url = api_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = session or httpclient.create_session()
        self._sleep = sleep
        self.consecutive_errors = 0

    def _attempt(self) -> RemoteState:
        resp, err = httpclient.request(self.session, "GET", self.api_url, timeout=self.timeout)
        if err:
            raise FetchError(err)
        try:
            return RemoteState.from_api(resp.json())
        except ValueError as e:
            raise FetchError(f"bad response body: {e}") from e

    def fetch(self) -> RemoteState:
        attempts = self.max_retries + 1
        last_error = None
        for attempt in range(attempts):
            logger.debug("[FETCH] Fetching server info (attempt %s/%s)", attempt + 1, attempts)
            try:
                state = self._attempt()
            except FetchError as e:
                last_error = e
                logger.warning("[FETCH] Failed to fetch server info (attempt %s/%s): %s", attempt + 1, attempts, e)
                if attempt < self.max_retries:
                    logger.info("[FETCH] Retrying in %ss...", self.retry_delay)
                    self._sleep(self.retry_delay)
                continue
            self.consecutive_errors = 0
            return state

        self.consecutive_errors += 1
        raise FetchError(f"Gave up after {attempts} attempts: {last_error}", cause=last_error, attempts=attempts)
