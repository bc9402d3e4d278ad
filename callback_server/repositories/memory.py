import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from callback_server.models.transaction import TransactionStatus
from callback_server.repositories.base import LedgerRepository, TransactionRecord, UserRecord


class InMemoryLedgerRepository(LedgerRepository):
    """Process-local store for development and tests. Not shared across instances."""

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.transactions: dict[str, TransactionRecord] = {}
        self._lock = asyncio.Lock()

    def add_user(self, telegram_id: int, balance: int = 0) -> UserRecord:
        user = UserRecord(id=uuid.uuid4().hex, telegram_id=telegram_id, balance=balance)
        self.users[user.id] = user
        return user

    def add_transaction(
        self,
        merchant_ref: str,
        user_id: str,
        amount: int,
        status: TransactionStatus = TransactionStatus.PENDING,
    ) -> TransactionRecord:
        if merchant_ref in self.transactions:
            raise ValueError(f"Duplicate merchant_ref: {merchant_ref}")
        txn = TransactionRecord(
            id=uuid.uuid4().hex,
            merchant_ref=merchant_ref,
            user_id=user_id,
            amount=amount,
            status=status,
        )
        self.transactions[merchant_ref] = txn
        return txn

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        yield

    async def find_pending_and_mark_paid(self, merchant_ref: str) -> TransactionRecord | None:
        async with self._lock:
            txn = self.transactions.get(merchant_ref)
            if txn is None or txn.status != TransactionStatus.PENDING:
                return None
            paid = txn.model_copy(update={"status": TransactionStatus.PAID, "paid_at": datetime.utcnow()})
            self.transactions[merchant_ref] = paid
            return paid.model_copy()

    async def load_user(self, user_id: str) -> UserRecord | None:
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    async def save_user(self, user: UserRecord) -> None:
        self.users[user.id] = user.model_copy()

    async def credit_user(self, user_id: str, amount: int) -> UserRecord | None:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={"balance": user.balance + amount})
            self.users[user_id] = updated
            return updated.model_copy()
