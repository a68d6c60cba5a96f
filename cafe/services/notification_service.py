"""
Fan-out of order events to push notification channels.

Concrete channel clients (LINE, Firebase, OneSignal) register themselves with
``register_notifier``; the built-in ``log`` channel only writes to the log.
Delivery is best effort: a failing channel is logged and skipped.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from cafe.core.config import NOTIFICATION_CHANNELS
from cafe.models.order import Order

log = logging.getLogger("cafe.notifications")


class Notifier(ABC):
    channel = "base"

    @abstractmethod
    async def send(self, event_type: str, order: Order) -> None:
        """Delivers one order event on this channel."""


class LogNotifier(Notifier):
    channel = "log"

    async def send(self, event_type: str, order: Order) -> None:
        log.info(f"[{event_type}] order {order.id} status={order.status} total={order.total}")


_notifiers: Dict[str, Notifier] = {}


def register_notifier(notifier: Notifier) -> None:
    _notifiers[notifier.channel] = notifier


def unregister_notifier(channel: str) -> None:
    _notifiers.pop(channel, None)


register_notifier(LogNotifier())


async def notify_order_event(event_type: str, order: Order, channels: Optional[Iterable[str]] = None) -> int:
    """Sends the event to every configured channel; returns how many succeeded."""
    delivered = 0
    for channel in channels if channels is not None else NOTIFICATION_CHANNELS:
        notifier = _notifiers.get(channel)
        if notifier is None:
            log.warning(f"No notifier registered for channel '{channel}'.")
            continue
        try:
            await notifier.send(event_type, order)
            delivered += 1
        except Exception as e:
            log.error(f"Channel '{channel}' failed to deliver {event_type} for order {order.id}: {e}")
    return delivered
