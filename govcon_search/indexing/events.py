"""
Data Update Events
Hook fired after bulk ingestion so caches and indexes can refresh
"""
import threading
from typing import Callable, Dict, List

from govcon_search.core.logging import get_logger

logger = get_logger(__name__)

DataUpdatedCallback = Callable[[str], None]


class DataUpdateNotifier:
    """
    Fan-out of "data updated" signals

    Callbacks run synchronously in subscription order. A failing callback
    is logged and does not stop the others.
    """

    def __init__(self):
        self._callbacks: List[DataUpdatedCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: DataUpdatedCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)

    def unsubscribe(self, callback: DataUpdatedCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def notify(self, source: str = "manual") -> Dict[str, List[str]]:
        """
        Signal that the underlying data changed

        Args:
            source: What changed the data ("csv-import", "sync", ...)

        Returns:
            Names of callbacks that succeeded and failed
        """
        with self._lock:
            callbacks = list(self._callbacks)

        logger.info(f"Data updated ({source}); notifying {len(callbacks)} subscriber(s)", extra={"source": source})

        result: Dict[str, List[str]] = {"succeeded": [], "failed": []}
        for callback in callbacks:
            name = getattr(callback, "__qualname__", repr(callback))
            try:
                callback(source)
                result["succeeded"].append(name)
            except Exception as e:
                logger.error(f"Data update subscriber {name} failed: {e}", extra={"source": source}, exc_info=True)
                result["failed"].append(name)
        return result
