"""Tests for the cycle controller."""

import threading

from status_bot.cycle import CycleController, CycleState
from status_bot.delivery import DeliveryResult
from status_bot.errors import FetchError
from status_bot.models import RemoteState

HOOKS = ["https://discord.com/api/webhooks/1/a", "https://discord.com/api/webhooks/2/b"]


class FakeFetcher:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.consecutive_errors = 0

    def fetch(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            self.consecutive_errors += 1
            raise outcome
        self.consecutive_errors = 0
        return outcome


class BlockingFetcher(FakeFetcher):
    def __init__(self):
        super().__init__([])
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch(self):
        self.calls += 1
        self.entered.set()
        self.release.wait(5)
        return RemoteState(human_count=1)


class FakeEngine:
    def __init__(self, success_count=None):
        self.success_count = success_count
        self.delivered = []

    def deliver(self, destinations, embed):
        destinations = list(destinations)
        self.delivered.append(embed)
        ok = len(destinations) if self.success_count is None else self.success_count
        return DeliveryResult(ok, len(destinations))


def make_controller(fetcher, engine, clock=lambda: 1000.0):
    return CycleController(fetcher, engine, HOOKS, 180, error_threshold=3, clock=clock)


class TestCycleController:
    def test_successful_cycle(self):
        engine = FakeEngine()
        controller = make_controller(FakeFetcher([RemoteState(human_count=4)]), engine)

        result = controller.trigger()

        assert result.success_count == 2
        assert len(engine.delivered) == 1
        assert engine.delivered[0].field("Online Players") is not None
        assert controller.state.last_success_timestamp == 1000.0
        assert controller.state.last_player_count == 4
        assert controller.state.is_running is False

    def test_failed_delivery_does_not_touch_last_success(self):
        controller = make_controller(FakeFetcher([RemoteState()]), FakeEngine(success_count=0))
        result = controller.trigger()
        assert not result.ok
        assert controller.state.last_success_timestamp is None

    def test_partial_delivery_counts_as_success(self):
        controller = make_controller(FakeFetcher([RemoteState()]), FakeEngine(success_count=1))
        controller.trigger()
        assert controller.state.last_success_timestamp == 1000.0

    def test_error_card_only_after_threshold(self):
        engine = FakeEngine()
        fetcher = FakeFetcher([FetchError("down")] * 4)
        controller = make_controller(fetcher, engine)

        assert controller.trigger() is None
        assert controller.trigger() is None
        assert engine.delivered == []

        result = controller.trigger()
        assert result.ok
        assert len(engine.delivered) == 1
        assert "after 3 consecutive attempts" in engine.delivered[0].description
        assert controller.state.consecutive_fetch_errors == 3
        assert controller.state.last_success_timestamp is None

        controller.trigger()
        assert "after 4 consecutive attempts" in engine.delivered[1].description
        assert controller.state.is_running is False

    def test_success_resets_error_count(self):
        fetcher = FakeFetcher([FetchError("down"), RemoteState()])
        controller = make_controller(fetcher, FakeEngine())
        controller.trigger()
        assert controller.state.consecutive_fetch_errors == 1
        controller.trigger()
        assert controller.state.consecutive_fetch_errors == 0

    def test_unexpected_error_clears_running_flag(self):
        class BrokenEngine(FakeEngine):
            def deliver(self, destinations, embed):
                raise RuntimeError("boom")

        controller = make_controller(FakeFetcher([RemoteState()]), BrokenEngine())
        assert controller.trigger() is None
        assert controller.state.is_running is False

    def test_trigger_while_running_is_skipped(self):
        fetcher = BlockingFetcher()
        engine = FakeEngine()
        controller = make_controller(fetcher, engine)

        worker = threading.Thread(target=controller.trigger)
        worker.start()
        assert fetcher.entered.wait(5)
        assert controller.state.is_running is True

        assert controller.trigger() is None
        assert fetcher.calls == 1

        fetcher.release.set()
        worker.join(5)
        assert fetcher.calls == 1
        assert len(engine.delivered) == 1
        assert controller.state.is_running is False

    def test_states_are_independent(self):
        a = make_controller(FakeFetcher([RemoteState()]), FakeEngine())
        b = make_controller(FakeFetcher([RemoteState()]), FakeEngine())
        a.trigger()
        assert b.state == CycleState()
