from __future__ import annotations

import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class PayoutSink(Protocol):
    """External account system that receives drained funds.

    `transfer` must either complete or raise; the registry only clears its
    balance after it returns.
    """

    def transfer(self, to: str, amount: int) -> None: ...


class AccountLedger:
    """In-memory payout sink tracking how much each principal has received."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._received: dict[str, int] = {}

    def transfer(self, to: str, amount: int) -> None:
        amount = int(amount)
        if amount < 0:
            raise ValueError("transfer amount must be >= 0")
        with self._lock:
            self._received[to] = self._received.get(to, 0) + amount
        logger.info("payout.transfer to=%s amount=%d", to, amount)

    def balance_of(self, principal: str) -> int:
        with self._lock:
            return self._received.get(principal, 0)

    def accounts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._received)
