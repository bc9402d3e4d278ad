from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from pydantic import BaseModel

from callback_server.models.transaction import TransactionStatus


class UserRecord(BaseModel):
    id: str
    telegram_id: int
    balance: int


class TransactionRecord(BaseModel):
    id: str
    merchant_ref: str
    user_id: str
    amount: int
    status: TransactionStatus
    paid_at: datetime | None = None


class LedgerRepository(ABC):
    """Storage the settlement engine depends on."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Unit of work: writes inside commit together where the store supports it."""
        ...

    @abstractmethod
    async def find_pending_and_mark_paid(self, merchant_ref: str) -> TransactionRecord | None:
        """Conditionally move PENDING -> PAID; return the updated transaction or None."""
        ...

    @abstractmethod
    async def load_user(self, user_id: str) -> UserRecord | None:
        ...

    @abstractmethod
    async def save_user(self, user: UserRecord) -> None:
        ...

    @abstractmethod
    async def credit_user(self, user_id: str, amount: int) -> UserRecord | None:
        """Atomically add `amount` to the balance; None if the user does not exist."""
        ...
