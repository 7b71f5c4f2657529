"""
In-memory order ledger.

Process-local mapping from transaction id to order record. Nothing is
persisted; records are lost on restart. No locking: concurrent writes for
the same id race and the last write wins.
"""

from __future__ import annotations

from typing import Dict, Optional

from src.integrations.contracts.interfaces import OrderLedger
from src.integrations.contracts.payments import OrderRecord


class InMemoryOrderLedger(OrderLedger):
    def __init__(self) -> None:
        self._orders: Dict[str, OrderRecord] = {}

    def get(self, tran_id: str) -> Optional[OrderRecord]:
        record = self._orders.get(tran_id)
        # Hand out copies so callers cannot mutate stored state in place.
        return record.model_copy(deep=True) if record is not None else None

    def put(self, tran_id: str, record: OrderRecord) -> None:
        self._orders[tran_id] = record.model_copy(deep=True)

    def list(self) -> Dict[str, OrderRecord]:
        return {tran_id: record.model_copy(deep=True) for tran_id, record in self._orders.items()}

    def __len__(self) -> int:
        return len(self._orders)
