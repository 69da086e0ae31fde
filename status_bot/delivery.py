from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .errors import DeliveryError
from .logging_setup import logger
from .render import Embed
from .store import MessageIdStore
from .webhooks import WebhookClient, mask_webhook_url

MAX_WORKERS = 8


@dataclass(frozen=True)
class DeliveryResult:
    success_count: int
    total_count: int

    @property
    def ok(self) -> bool:
        return self.success_count > 0

    def __bool__(self) -> bool:
        return self.ok


class DeliveryEngine:
    """Fans one card out to every destination, editing in place when it can.

    Per destination: edit the recorded message; if that fails, forget the id
    and post a fresh message, remembering the new id. Destinations never
    affect each other and nothing here retries or raises.
    """

    def __init__(self, client: WebhookClient, store: MessageIdStore, max_workers: int = MAX_WORKERS):
        self.client = client
        self.store = store
        self.max_workers = max_workers

    def _try_update(self, destination: str, message_id: str, payload: dict) -> bool:
        try:
            self.client.edit_message(destination, message_id, payload)
        except DeliveryError as e:
            logger.info("[DELIVERY] Update of %s failed (%s), posting a new message", mask_webhook_url(destination), e)
            self.store.delete(destination)
            return False
        logger.info("[DELIVERY] Message updated: %s", mask_webhook_url(destination))
        return True

    def _try_post(self, destination: str, payload: dict) -> bool:
        try:
            new_id = self.client.post_message(destination, payload)
        except DeliveryError as e:
            logger.error("[DELIVERY] Webhook failed %s: %s", mask_webhook_url(destination), e)
            return False
        if new_id:
            self.store.set(destination, new_id)
            logger.info("[DELIVERY] New message posted: %s", mask_webhook_url(destination))
        else:
            logger.warning("[DELIVERY] Posted to %s but no message id came back", mask_webhook_url(destination))
        return True

    def deliver_one(self, destination: str, payload: dict) -> bool:
        try:
            message_id = self.store.get(destination)
            if message_id and self._try_update(destination, message_id, payload):
                return True
            return self._try_post(destination, payload)
        except Exception:
            logger.exception("[DELIVERY] Unexpected error delivering to %s", mask_webhook_url(destination))
            return False

    def deliver(self, destinations, embed: Embed) -> DeliveryResult:
        targets = list(dict.fromkeys(destinations))
        if not targets:
            return DeliveryResult(0, 0)

        payload = {"embeds": [embed.to_dict()]}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets))) as pool:
            results = list(pool.map(lambda d: self.deliver_one(d, payload), targets))

        result = DeliveryResult(sum(1 for ok in results if ok), len(targets))
        if result.ok:
            logger.info("[DELIVERY] Notifications sent: %s/%s webhooks", result.success_count, result.total_count)
        else:
            logger.error("[DELIVERY] All notifications failed (%s webhooks)", result.total_count)
        return result
