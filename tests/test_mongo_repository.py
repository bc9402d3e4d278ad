"""MongoLedgerRepository against the MongoDB at MONGODB_URI."""

import os

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from callback_server.core.config import Settings
from callback_server.core.exceptions import StoreUnavailableError
from callback_server.models.transaction import Transaction, TransactionStatus
from callback_server.models.user import User
from callback_server.repositories.mongo import MongoLedgerRepository
from callback_server.services.ledger import SettlementOutcome, settle

pytestmark = pytest.mark.asyncio

MONGODB_URI = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")


@pytest_asyncio.fixture
async def mongo_repository():
    ping_client = AsyncIOMotorClient(MONGODB_URI, serverSelectionTimeoutMS=1000)
    try:
        await ping_client.admin.command("ping")
    except PyMongoError:
        pytest.skip("MongoDB not reachable at MONGODB_URI")
    finally:
        ping_client.close()

    from callback_server.db.init import init_db
    settings = Settings(mongodb_uri=MONGODB_URI, mongodb_db_name="callback_server_test")
    client = await init_db(settings)
    await User.get_motor_collection().delete_many({})
    await Transaction.get_motor_collection().delete_many({})
    yield MongoLedgerRepository(client, use_transactions=False)
    await User.get_motor_collection().delete_many({})
    await Transaction.get_motor_collection().delete_many({})
    client.close()


async def _seed(merchant_ref="ABC123", amount=50000, balance=10000, status=TransactionStatus.PENDING):
    user = User(telegram_id=555001, balance=balance)
    await user.insert()
    await Transaction(merchant_ref=merchant_ref, user=user, amount=amount, status=status).insert()
    return user


async def test_mark_paid_transitions_once(mongo_repository):
    user = await _seed()

    first = await mongo_repository.find_pending_and_mark_paid("ABC123")
    second = await mongo_repository.find_pending_and_mark_paid("ABC123")

    assert first is not None
    assert first.status is TransactionStatus.PAID
    assert first.user_id == str(user.id)
    assert first.paid_at is not None
    assert second is None
    stored = await Transaction.find_one(Transaction.merchant_ref == "ABC123")
    assert stored.status is TransactionStatus.PAID


async def test_unknown_or_paid_reference_returns_none(mongo_repository):
    await _seed(merchant_ref="DONE", status=TransactionStatus.PAID)

    assert await mongo_repository.find_pending_and_mark_paid("UNKNOWN") is None
    assert await mongo_repository.find_pending_and_mark_paid("DONE") is None


async def test_credit_user_increments_balance(mongo_repository):
    user = await _seed()

    credited = await mongo_repository.credit_user(str(user.id), 50000)

    assert credited.balance == 60000
    assert (await mongo_repository.load_user(str(user.id))).balance == 60000


async def test_credit_missing_user_returns_none(mongo_repository):
    assert await mongo_repository.credit_user("000000000000000000000000", 50000) is None


async def test_settle_twice_credits_once(mongo_repository):
    user = await _seed()

    first = await settle(mongo_repository, "ABC123")
    second = await settle(mongo_repository, "ABC123")

    assert first.outcome is SettlementOutcome.SETTLED
    assert second.outcome is SettlementOutcome.NO_MATCH
    assert (await User.get(user.id)).balance == 60000


async def test_save_user_persists_balance(mongo_repository):
    user = await _seed()
    record = await mongo_repository.load_user(str(user.id))

    await mongo_repository.save_user(record.model_copy(update={"balance": 1234}))

    assert (await User.get(user.id)).balance == 1234


async def test_driver_error_maps_to_store_unavailable(mongo_repository, monkeypatch):
    def unavailable(cls, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(Transaction, "find_one", classmethod(unavailable))

    with pytest.raises(StoreUnavailableError):
        await mongo_repository.find_pending_and_mark_paid("ABC123")
