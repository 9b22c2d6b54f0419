import threading
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class PaymentSnapshot:
    status: str = "unknown"
    amount: Any = 0
    gateway_response: dict = field(default_factory=dict)


class PaymentStore(Protocol):
    def get(self, transaction_id: str) -> Optional[PaymentSnapshot]:
        ...

    def set(self, transaction_id: str, snapshot: PaymentSnapshot) -> None:
        ...

    def merge(
        self,
        transaction_id: str,
        status: Optional[str],
        amount: Any,
        gateway_response: dict,
    ) -> PaymentSnapshot:
        ...


class InMemoryPaymentStore:
    """
    Process-lifetime map of transaction id -> last known snapshot.
    Nothing is persisted or expired.
    """

    def __init__(self):
        self._items: dict[str, PaymentSnapshot] = {}
        self._lock = threading.Lock()

    def get(self, transaction_id: str) -> Optional[PaymentSnapshot]:
        with self._lock:
            return self._items.get(transaction_id)

    def set(self, transaction_id: str, snapshot: PaymentSnapshot) -> None:
        with self._lock:
            self._items[transaction_id] = snapshot

    def merge(
        self,
        transaction_id: str,
        status: Optional[str],
        amount: Any,
        gateway_response: dict,
    ) -> PaymentSnapshot:
        with self._lock:
            current = self._items.get(transaction_id, PaymentSnapshot())
            merged = replace(
                current,
                status=status if status else current.status,
                amount=amount if amount is not None else current.amount,
                gateway_response=gateway_response,
            )
            self._items[transaction_id] = merged
            return merged

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
