"""Shared fakes. Nothing in the test suite touches the network."""

import json

import pytest
import requests

from status_bot.errors import DeliveryError


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Replays queued responses (or exceptions) and records every call."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class FakeWebhookClient:
    """Scripted webhook client.

    ``edit_ok`` / ``post_ok`` map destination -> bool; ``post_ids`` maps
    destination -> id returned on a successful post.
    """

    def __init__(self, edit_ok=None, post_ok=None, post_ids=None):
        self.edit_ok = edit_ok or {}
        self.post_ok = post_ok or {}
        self.post_ids = post_ids or {}
        self.edits = []
        self.posts = []

    def edit_message(self, webhook_url, message_id, payload):
        self.edits.append((webhook_url, message_id))
        if not self.edit_ok.get(webhook_url, True):
            raise DeliveryError("edit failed: 404 - Unknown Message", status_code=404)

    def post_message(self, webhook_url, payload):
        self.posts.append(webhook_url)
        if not self.post_ok.get(webhook_url, True):
            raise DeliveryError("post failed: 403 - Missing Permissions", status_code=403)
        return self.post_ids.get(webhook_url)


@pytest.fixture
def server_payload():
    return {
        "numHumans": 6,
        "maxClients": 24,
        "numBots": 2,
        "serverIP": "104.153.104.12:27015",
        "serverName": "Raccoon Lagoon",
        "map": "pl_upward",
        "humanData": [
            {"name": "Alpaca", "score": 12, "time": 3661},
            {"name": "Badger", "score": 0, "time": 120},
            {"name": "  ", "score": 0, "time": 5},
            {"name": "Coyote", "score": 12, "time": 900},
        ],
    }


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
