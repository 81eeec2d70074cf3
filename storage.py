import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from models import Order


class ClaimStatus(str, Enum):
    CLAIMED = "CLAIMED"
    ALREADY_FULFILLED = "ALREADY_FULFILLED"
    UNKNOWN = "UNKNOWN"


@dataclass
class _Entry:
    order: Order
    expires_at: float
    fulfilled: bool = False


# pending orders keyed by the order_id in the success URL; each is claimed at most once
class OrderStore:
    def __init__(self, ttl_seconds: int = 86400, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # order_id -> entry
        self._entries: Dict[str, _Entry] = {}

    def __len__(self) -> int:
        self._purge()
        return len(self._entries)

    def _purge(self) -> None:
        now = self._clock()
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for k in expired:
            del self._entries[k]

    def put(self, order: Order) -> str:
        self._purge()
        order_id = secrets.token_urlsafe(16)
        self._entries[order_id] = _Entry(order=order, expires_at=self._clock() + self.ttl_seconds)
        return order_id

    def claim(self, order_id: Optional[str]) -> Tuple[ClaimStatus, Optional[Order]]:
        self._purge()
        entry = self._entries.get(order_id) if order_id else None
        if entry is None:
            return ClaimStatus.UNKNOWN, None
        if entry.fulfilled:
            return ClaimStatus.ALREADY_FULFILLED, entry.order
        entry.fulfilled = True
        return ClaimStatus.CLAIMED, entry.order
