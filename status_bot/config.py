import os
from dataclasses import dataclass, field

from .errors import ConfigError

# === USER CONFIG (edit me, or override with environment variables / .env) ===
# Quick setup:
# 1) Put your webhook(s) in DISCORD_WEBHOOK_URLS (comma separated)
# 2) (Optional) Point SERVER_API_URL at your own server
# 3) (Optional) Tweak POLL_INTERVAL, MAX_RETRIES and RETRY_DELAY

# Status endpoint (JSON). Queried once per cycle.
DEFAULT_SERVER_API_URL = "https://api.raccoonlagoon.com/v1/server-info?ip=104.153.104.12:27015&g=tf2"

# How often to refresh the card. Either a minute count ("3") or cron shorthand ("*/3 * * * *").
DEFAULT_POLL_INTERVAL = "*/3 * * * *"

# Fetch behavior
DEFAULT_MAX_RETRIES = 3          # retries after the first attempt
DEFAULT_RETRY_DELAY = 30         # seconds between attempts
DEFAULT_REQUEST_TIMEOUT = 15     # seconds per status request
DEFAULT_WEBHOOK_TIMEOUT = 10     # seconds per webhook call

# Consecutive failed fetches before an error card replaces the status card
DEFAULT_ERROR_NOTIFY_THRESHOLD = 3

# Seconds to wait before the very first check
DEFAULT_STARTUP_DELAY = 5

# Where message ids are remembered between restarts
DEFAULT_MESSAGE_IDS_FILE = "message_ids.json"

# Card look
DEFAULT_FOOTER_TEXT = "api.raccoonlagoon.com"
DEFAULT_FOOTER_ICON_URL = "https://static.raccoonlagoon.com/images/raccoon_lagoon.png"
DEFAULT_JOIN_URL_TEMPLATE = "https://raccoonlagoon.com/connect/{address}"  # blank disables the join link


def parse_webhook_urls(*raw_values: str | None) -> list[str]:
    """Split comma separated webhook lists, drop blanks and keep the first occurrence of each URL."""
    urls = []
    for raw in raw_values:
        if not raw:
            continue
        for url in raw.split(","):
            url = url.strip()
            if url and url not in urls:
                urls.append(url)
    return urls


def parse_poll_interval(value: str | int) -> int:
    """Return the poll interval in seconds.

    Accepts a plain minute count or the ``*/N * * * *`` cron shorthand. The same
    number feeds the trigger and the "next refresh" marker on the card, so the
    two cannot drift apart.
    """
    text = str(value).strip()
    if text.isdigit():
        minutes = int(text)
    else:
        parts = text.split()
        if len(parts) != 5 or any(p != "*" for p in parts[1:]):
            raise ConfigError(f"Unsupported POLL_INTERVAL {text!r}; use a minute count or '*/N * * * *'")
        head = parts[0]
        if head == "*":
            minutes = 1
        elif head.startswith("*/") and head[2:].isdigit():
            minutes = int(head[2:])
        else:
            raise ConfigError(f"Unsupported POLL_INTERVAL {text!r}; use a minute count or '*/N * * * *'")
    if minutes < 1:
        raise ConfigError("POLL_INTERVAL must be at least one minute")
    return minutes * 60


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Everything the bot needs at runtime."""

    webhook_urls: list[str] = field(default_factory=list)
    server_api_url: str = DEFAULT_SERVER_API_URL
    poll_interval: str = DEFAULT_POLL_INTERVAL
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT
    error_notify_threshold: int = DEFAULT_ERROR_NOTIFY_THRESHOLD
    startup_delay: float = DEFAULT_STARTUP_DELAY
    message_ids_file: str = DEFAULT_MESSAGE_IDS_FILE
    footer_text: str = DEFAULT_FOOTER_TEXT
    footer_icon_url: str = DEFAULT_FOOTER_ICON_URL
    join_url_template: str = DEFAULT_JOIN_URL_TEMPLATE
    log_level: str = "INFO"
    debug_log_enabled: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to the constants above."""
        return cls(
            webhook_urls=parse_webhook_urls(os.getenv("DISCORD_WEBHOOK_URLS"), os.getenv("DISCORD_WEBHOOK_URL")),
            server_api_url=os.getenv("SERVER_API_URL", "").strip() or DEFAULT_SERVER_API_URL,
            poll_interval=os.getenv("POLL_INTERVAL", "").strip() or DEFAULT_POLL_INTERVAL,
            max_retries=_env_int("MAX_RETRIES", DEFAULT_MAX_RETRIES),
            retry_delay=_env_int("RETRY_DELAY", DEFAULT_RETRY_DELAY),
            request_timeout=_env_int("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            webhook_timeout=_env_int("WEBHOOK_TIMEOUT", DEFAULT_WEBHOOK_TIMEOUT),
            error_notify_threshold=_env_int("ERROR_NOTIFY_THRESHOLD", DEFAULT_ERROR_NOTIFY_THRESHOLD),
            startup_delay=_env_int("STARTUP_DELAY", DEFAULT_STARTUP_DELAY),
            message_ids_file=os.getenv("MESSAGE_IDS_FILE", "").strip() or DEFAULT_MESSAGE_IDS_FILE,
            footer_text=os.getenv("FOOTER_TEXT", DEFAULT_FOOTER_TEXT),
            footer_icon_url=os.getenv("FOOTER_ICON_URL", DEFAULT_FOOTER_ICON_URL),
            join_url_template=os.getenv("JOIN_URL_TEMPLATE", DEFAULT_JOIN_URL_TEMPLATE),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            debug_log_enabled=_env_bool("DEBUG_LOG_ENABLED", False),
        )

    @property
    def poll_interval_seconds(self) -> int:
        return parse_poll_interval(self.poll_interval)

    def validate(self) -> list[str]:
        """Return a list of problems that make startup impossible."""
        errors = []
        if not self.webhook_urls:
            errors.append("At least one webhook URL is required (DISCORD_WEBHOOK_URLS or DISCORD_WEBHOOK_URL)")
        try:
            self.poll_interval_seconds
        except ConfigError as e:
            errors.append(str(e))
        if self.max_retries < 0:
            errors.append("MAX_RETRIES must not be negative")
        if self.retry_delay < 0:
            errors.append("RETRY_DELAY must not be negative")
        if self.request_timeout <= 0 or self.webhook_timeout <= 0:
            errors.append("REQUEST_TIMEOUT and WEBHOOK_TIMEOUT must be positive")
        if self.error_notify_threshold < 1:
            errors.append("ERROR_NOTIFY_THRESHOLD must be at least 1")
        return errors
