"""Server status bot: polls a game-server status API and keeps a status card up to date on Discord webhooks."""

__version__ = "1.2.0"
