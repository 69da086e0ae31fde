class StatusBotError(Exception):
    """Base class for every error raised by the bot."""


class ConfigError(StatusBotError):
    """Startup configuration is unusable. The only error that ends the process."""


class FetchError(StatusBotError):
    """The status endpoint could not be read after all retries."""

    def __init__(self, message: str, cause: Exception | None = None, attempts: int = 0):
        super().__init__(message)
        self.cause = cause
        self.attempts = attempts


class DeliveryError(StatusBotError):
    """A single webhook call failed. Never escapes the delivery engine."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(StatusBotError):
    """Reading or writing the message id file failed."""
