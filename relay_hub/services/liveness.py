import logging
from typing import Callable, List, Optional

import tornado.ioloop

from relay_hub.errors import DeliveryError
from relay_hub.services.connection import Connection
from relay_hub.services.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class LivenessMonitor:
    """
    Heartbeat sweep over every open connection.

    A connection that has not been confirmed alive since the previous sweep is
    terminated; the rest are marked unconfirmed and pinged. A peer therefore
    survives one missed heartbeat and is evicted on the second.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        interval: float = 30.0,
        on_evict: Optional[Callable[[Connection], None]] = None,
    ):
        self.registry = registry
        self.interval = interval
        self.on_evict = on_evict or registry.deregister
        self._callback: Optional[tornado.ioloop.PeriodicCallback] = None

    def sweep(self) -> List[Connection]:
        evicted = []
        for connection in self.registry.connections():
            if not connection.is_alive:
                logger.info(f"Evicting {connection.id}: no heartbeat reply")
                connection.terminate()
                evicted.append(connection)
                continue
            connection.is_alive = False
            try:
                connection.ping()
            except DeliveryError:
                logger.info(f"Evicting {connection.id}: transport closed")
                evicted.append(connection)
        for connection in evicted:
            self.on_evict(connection)
        return evicted

    def start(self) -> None:
        if self._callback is None:
            self._callback = tornado.ioloop.PeriodicCallback(self.sweep, self.interval * 1000)
        self._callback.start()

    def stop(self) -> None:
        if self._callback is not None:
            self._callback.stop()
