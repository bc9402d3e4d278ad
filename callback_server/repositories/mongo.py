from contextlib import asynccontextmanager
from datetime import datetime
from functools import wraps
from typing import AsyncIterator

from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Inc, Set
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from pymongo.errors import PyMongoError

from callback_server.core.exceptions import StoreUnavailableError
from callback_server.core.logging import get_logger
from callback_server.models.transaction import Transaction, TransactionStatus
from callback_server.models.user import User
from callback_server.repositories.base import LedgerRepository, TransactionRecord, UserRecord

log = get_logger(__name__)


def _store_call(fn):
    @wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except PyMongoError as exc:
            log.error("store_error", operation=fn.__name__, error=str(exc))
            raise StoreUnavailableError(details={"operation": fn.__name__}) from exc
    return wrapper


def _user_record(doc: User) -> UserRecord:
    return UserRecord(id=str(doc.id), telegram_id=doc.telegram_id, balance=doc.balance)


def _transaction_record(doc: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=str(doc.id),
        merchant_ref=doc.merchant_ref,
        user_id=str(doc.user.ref.id),
        amount=doc.amount,
        status=doc.status,
        paid_at=doc.paid_at,
    )


class MongoLedgerRepository(LedgerRepository):
    """Beanie-backed ledger. One instance per request; holds the open session, if any."""

    def __init__(self, client: AsyncIOMotorClient, use_transactions: bool = False) -> None:
        self.client = client
        self.use_transactions = use_transactions
        self._session: AsyncIOMotorClientSession | None = None

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        if not self.use_transactions:
            yield
            return
        try:
            session = await self.client.start_session()
        except PyMongoError as exc:
            raise StoreUnavailableError(details={"operation": "start_session"}) from exc
        try:
            async with session.start_transaction():
                self._session = session
                yield
        except PyMongoError as exc:
            log.error("store_error", operation="commit", error=str(exc))
            raise StoreUnavailableError(details={"operation": "commit"}) from exc
        finally:
            self._session = None
            await session.end_session()

    @_store_call
    async def find_pending_and_mark_paid(self, merchant_ref: str) -> TransactionRecord | None:
        doc = await Transaction.find_one(
            Transaction.merchant_ref == merchant_ref,
            Transaction.status == TransactionStatus.PENDING,
            session=self._session,
        ).update(
            Set({Transaction.status: TransactionStatus.PAID, Transaction.paid_at: datetime.utcnow()}),
            session=self._session,
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        return _transaction_record(doc) if doc else None

    @_store_call
    async def load_user(self, user_id: str) -> UserRecord | None:
        doc = await User.get(PydanticObjectId(user_id), session=self._session)
        return _user_record(doc) if doc else None

    @_store_call
    async def save_user(self, user: UserRecord) -> None:
        await User.find_one(User.id == PydanticObjectId(user.id), session=self._session).update(
            Set({User.balance: user.balance, User.updated_at: datetime.utcnow()}),
            session=self._session,
        )

    @_store_call
    async def credit_user(self, user_id: str, amount: int) -> UserRecord | None:
        doc = await User.find_one(User.id == PydanticObjectId(user_id), session=self._session).update(
            Inc({User.balance: amount}),
            Set({User.updated_at: datetime.utcnow()}),
            session=self._session,
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        return _user_record(doc) if doc else None
