from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .payments import OrderRecord


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass
class GeneratedImage:
    content: bytes
    content_type: str
    seed: int


# ---------------------------------------------------------------------------
# Abstract interfaces
# ---------------------------------------------------------------------------

class OrderLedger(ABC):
    """Storage for order records keyed by transaction id."""

    @abstractmethod
    def get(self, tran_id: str) -> Optional[OrderRecord]:
        """Return the stored record or None."""

    @abstractmethod
    def put(self, tran_id: str, record: OrderRecord) -> None:
        """Store the record, replacing any previous one."""

    @abstractmethod
    def list(self) -> Dict[str, OrderRecord]:
        """Return every stored record keyed by transaction id."""

    def ping(self) -> bool:
        return True


class PaymentGateway(ABC):
    """Every payment gateway client must implement this interface."""

    @abstractmethod
    async def initiate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Open a checkout session; returns the provider's raw response."""

    @abstractmethod
    async def validate(
        self,
        val_id: str,
        store_id: Optional[str] = None,
        store_passwd: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Look up a validation id; returns the provider's raw response."""


class ImageProvider(ABC):
    @abstractmethod
    async def fetch_image(
        self,
        prompt: str,
        seed: int,
        width: Optional[str] = None,
        height: Optional[str] = None,
    ) -> GeneratedImage:
        """Generate a single image for the prompt and seed."""
