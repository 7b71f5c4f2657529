"""
Redis-backed order ledger for deployments where REDIS_URL is set.
Implements the same interface as src.database.order_ledger (in-memory).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import redis
from pydantic import ValidationError

from src.integrations.contracts.interfaces import OrderLedger
from src.integrations.contracts.payments import OrderRecord

logger = logging.getLogger(__name__)


class RedisOrderLedger(OrderLedger):
    """
    Stores each order as a JSON document under ``order:<tran_id>``.
    Keys never expire, matching the in-memory ledger.
    """

    KEY_PREFIX = "order:"

    def __init__(self, url: Optional[str] = None, client: Any = None) -> None:
        if client is None and not url:
            raise ValueError("RedisOrderLedger needs either a url or a client")
        self._client = client or redis.from_url(url, decode_responses=True)

    def _key(self, tran_id: str) -> str:
        return f"{self.KEY_PREFIX}{tran_id}"

    def get(self, tran_id: str) -> Optional[OrderRecord]:
        raw = self._client.get(self._key(tran_id))
        if not raw:
            return None
        return self._decode(tran_id, raw)

    def put(self, tran_id: str, record: OrderRecord) -> None:
        self._client.set(self._key(tran_id), record.model_dump_json())

    def list(self) -> Dict[str, OrderRecord]:
        orders: Dict[str, OrderRecord] = {}
        for key in self._client.scan_iter(match=f"{self.KEY_PREFIX}*"):
            tran_id = key[len(self.KEY_PREFIX):]
            record = self.get(tran_id)
            if record is not None:
                orders[tran_id] = record
        return orders

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    @staticmethod
    def _decode(tran_id: str, raw: str) -> Optional[OrderRecord]:
        try:
            return OrderRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Corrupt order document for tran_id=%s: %s", tran_id, e)
            return None
