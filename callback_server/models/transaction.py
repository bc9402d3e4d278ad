from datetime import datetime
from enum import Enum

from beanie import Document, Indexed, Link
from pydantic import Field

from callback_server.models.user import User


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class Transaction(Document):
    """Checkout attempt keyed by the provider's merchant_ref."""
    merchant_ref: Indexed(str, unique=True)
    user: Link[User]
    amount: int  # minor units, > 0
    status: TransactionStatus = TransactionStatus.PENDING
    paid_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "transactions"
        indexes = [[("merchant_ref", 1), ("status", 1)]]
