"""Tests for the periodic trigger and process wiring."""

import threading

from status_bot import __main__ as entry
from status_bot.cycle import CycleController
from status_bot.config import Settings
from status_bot.scheduler import Ticker, next_tick


class TestNextTick:
    def test_aligned_to_interval(self):
        assert next_tick(0, 180) == 180
        assert next_tick(179.9, 180) == 180
        assert next_tick(180, 180) == 360
        assert next_tick(1_700_000_005, 60) == 1_700_000_040


class TestTicker:
    def test_fires_until_stopped(self):
        fired = threading.Event()
        count = []

        def callback():
            count.append(1)
            if len(count) >= 2:
                fired.set()

        ticker = Ticker(1, callback, initial_delay=0)
        runner = threading.Thread(target=ticker.run)
        runner.start()
        assert fired.wait(5)
        ticker.stop()
        runner.join(5)

        assert not runner.is_alive()
        assert ticker.stopped
        assert ticker.fired >= 2

    def test_stop_during_startup_delay(self):
        calls = []
        ticker = Ticker(60, lambda: calls.append(1), initial_delay=30)
        ticker.stop()
        ticker.run()
        assert calls == []
        assert ticker.fired == 0


class TestMain:
    def test_exits_without_webhooks(self, monkeypatch):
        monkeypatch.setattr(entry, "load_dotenv", lambda: None)
        monkeypatch.delenv("DISCORD_WEBHOOK_URLS", raising=False)
        monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)
        monkeypatch.delenv("POLL_INTERVAL", raising=False)
        assert entry.main() == 1

    def test_exits_on_bad_number(self, monkeypatch):
        monkeypatch.setattr(entry, "load_dotenv", lambda: None)
        monkeypatch.setenv("MAX_RETRIES", "lots")
        assert entry.main() == 1

    def test_build_controller_shares_interval(self, tmp_path):
        settings = Settings(
            webhook_urls=["https://discord.com/api/webhooks/1/a"],
            poll_interval="*/5 * * * *",
            message_ids_file=str(tmp_path / "message_ids.json"),
        )
        controller = entry.build_controller(settings)

        assert isinstance(controller, CycleController)
        assert controller.refresh_interval_seconds == 300
        assert controller.destinations == settings.webhook_urls
        assert controller.fetcher.max_retries == 3
