"""In-process fan-out of ticket change notifications"""
from typing import Callable, Dict
import itertools
import logging

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


class Subscription:
    """Handle for one registered callback; released exactly once"""

    def __init__(self, feed: "ChangeFeed", key: int):
        self._feed = feed
        self._key = key
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._remove(self._key)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ChangeFeed:
    """
    Change notifications for the tickets collection.

    Callbacks take no arguments: a notification only means "something
    changed, refetch".
    """

    def __init__(self):
        self._callbacks: Dict[int, ChangeCallback] = {}
        self._keys = itertools.count()

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        key = next(self._keys)
        self._callbacks[key] = callback
        return Subscription(self, key)

    def publish(self, event: str = "*") -> None:
        """Notify every live subscriber of an insert/update/delete"""
        logger.debug(f"Ticket change ({event}) -> {len(self._callbacks)} subscribers")
        for key, callback in list(self._callbacks.items()):
            try:
                callback()
            except Exception as e:
                logger.error(f"Change subscriber {key} failed: {e}")

    def _remove(self, key: int) -> None:
        self._callbacks.pop(key, None)
