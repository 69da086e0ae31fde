import signal
import sys

from dotenv import load_dotenv

from . import __version__
from .config import Settings
from .cycle import CycleController
from .delivery import DeliveryEngine
from .errors import ConfigError
from .fetcher import ServerFetcher
from .httpclient import create_session
from .logging_setup import logger, setup_logging
from .render import CardStyle
from .scheduler import Ticker
from .store import MessageIdStore
from .webhooks import WebhookClient


def build_controller(settings: Settings) -> CycleController:
    session = create_session()
    store = MessageIdStore(settings.message_ids_file)
    store.load()
    fetcher = ServerFetcher(
        settings.server_api_url,
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay,
        timeout=settings.request_timeout,
        session=session,
    )
    engine = DeliveryEngine(WebhookClient(session, timeout=settings.webhook_timeout), store)
    style = CardStyle(
        footer_text=settings.footer_text,
        footer_icon_url=settings.footer_icon_url,
        join_url_template=settings.join_url_template,
    )
    return CycleController(
        fetcher,
        engine,
        settings.webhook_urls,
        settings.poll_interval_seconds,
        error_threshold=settings.error_notify_threshold,
        style=style,
    )


def main() -> int:
    load_dotenv()
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        setup_logging()
        logger.error("[INIT] %s", e)
        return 1

    setup_logging(settings.log_level, settings.debug_log_enabled)
    logger.info("[INIT] Starting server status bot v%s", __version__)

    errors = settings.validate()
    if errors:
        for err in errors:
            logger.error("[INIT] %s", err)
        return 1

    controller = build_controller(settings)
    logger.info("[INIT] Poll interval: %s (%ss)", settings.poll_interval, settings.poll_interval_seconds)
    logger.info("[INIT] Server API: %s", settings.server_api_url)
    logger.info("[INIT] Discord webhooks: %s configured", len(settings.webhook_urls))

    ticker = Ticker(settings.poll_interval_seconds, controller.trigger, initial_delay=settings.startup_delay)

    def _graceful_exit(signum, frame):
        logger.info("[SHUTDOWN] Signal %s received. Shutting down gracefully...", signum)
        ticker.stop()

    for _sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)):
        if _sig:
            signal.signal(_sig, _graceful_exit)

    ticker.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
