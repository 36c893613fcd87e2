"""Wallet session: the signed-in address and its change notifications."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .identity import normalize_address, require_valid_address

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[str], Optional[str]], None]


class WalletSession:
    """Holds the connected address and a generation counter.

    Every address change bumps ``generation``. Asynchronous work captures the
    generation before it suspends and drops its result when
    ``is_current(generation)`` is False on resumption.
    """

    def __init__(self, address: Optional[str] = None) -> None:
        self._address: Optional[str] = require_valid_address(address) if address else None
        self._generation = 0
        self._listeners: List[SessionListener] = []

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def connected(self) -> bool:
        return self._address is not None

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener(old_address, new_address)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def connect(self, address: str) -> None:
        self._switch(require_valid_address(address))

    def disconnect(self) -> None:
        self._switch(None)

    def _switch(self, address: Optional[str]) -> None:
        if address == self._address:
            return
        previous = self._address
        self._address = address
        self._generation += 1
        logger.info(
            "Session switched %s -> %s (generation=%d)",
            previous or "-",
            address or "-",
            self._generation,
        )
        for listener in list(self._listeners):
            listener(previous, address)

    def matches(self, address: Optional[str]) -> bool:
        return self._address is not None and normalize_address(address) == self._address
