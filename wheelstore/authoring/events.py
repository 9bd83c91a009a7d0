# wheelstore/authoring/events.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductEvent:
    kind: str  # "created" | "updated" | "deleted"
    product_id: Optional[int] = None


Listener = Callable[[ProductEvent], None]


class ProductEvents:
    """Explicit subscription point for product changes (e.g. cache invalidation)."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ProductEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.warning("Product event listener failed: %s", exc)
