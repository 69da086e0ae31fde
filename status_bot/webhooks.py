from urllib.parse import urlsplit, urlunsplit

import requests

from . import httpclient
from .errors import DeliveryError

INVALID_WEBHOOK = "invalid-webhook-url"
_VISIBLE_SEGMENTS = 2
_VISIBLE_PREFIX = 4


def mask_webhook_url(url: str) -> str:
    """Log-safe form of a webhook URL.

    Keeps the host and the leading path segments (``/api/webhooks``), shows a
    short prefix of the next segment and redacts everything after it.
    """
    try:
        parts = urlsplit(str(url))
    except ValueError:
        return INVALID_WEBHOOK
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return INVALID_WEBHOOK

    segments = [s for s in parts.path.split("/") if s]
    keep = min(_VISIBLE_SEGMENTS, max(len(segments) - 1, 0))
    masked = segments[:keep]
    for i, seg in enumerate(segments[keep:]):
        if i == 0 and len(seg) > 2 * _VISIBLE_PREFIX:
            masked.append(seg[:_VISIBLE_PREFIX] + "***")
        else:
            masked.append("***")
    path = "/" + "/".join(masked) if masked else ""
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def message_url(webhook_url: str, message_id: str) -> str:
    """``{webhook}/messages/{id}``, keeping any query (``?thread_id=``) after the path."""
    parts = urlsplit(webhook_url)
    path = parts.path.rstrip("/") + f"/messages/{message_id}"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def _scrub(text: str, webhook_url: str) -> str:
    """Replace the webhook URL, or its bare path, with the masked form."""
    masked = mask_webhook_url(webhook_url)
    text = text.replace(webhook_url, masked)
    path = urlsplit(webhook_url).path
    if path.strip("/"):
        text = text.replace(path, urlsplit(masked).path or "/***")
    return text


class WebhookClient:
    """Posts and edits messages on Discord-style webhooks."""

    def __init__(self, session: requests.Session | None = None, timeout: float = 10):
        self.session = session or httpclient.create_session()
        self.timeout = timeout

    def edit_message(self, webhook_url: str, message_id: str, payload: dict) -> None:
        resp, err = httpclient.request(self.session, "PATCH", message_url(webhook_url, message_id),
                                       json_payload=payload, timeout=self.timeout)
        if err:
            raise DeliveryError(f"edit failed: {_scrub(err, webhook_url)}", status_code=getattr(resp, "status_code", None))

    def post_message(self, webhook_url: str, payload: dict) -> str | None:
        """Create a message and return its id, or None when the response carries no id."""
        sep = "&" if "?" in webhook_url else "?"
        resp, err = httpclient.request(self.session, "POST", f"{webhook_url}{sep}wait=true",
                                       json_payload=payload, timeout=self.timeout)
        if err:
            raise DeliveryError(f"post failed: {_scrub(err, webhook_url)}", status_code=getattr(resp, "status_code", None))
        try:
            data = resp.json()
        except ValueError:
            return None
        message_id = data.get("id") if isinstance(data, dict) else None
        return str(message_id) if message_id else None
