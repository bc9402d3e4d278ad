from callback_server.models.user import User
from callback_server.models.transaction import Transaction, TransactionStatus

__all__ = [
    "User",
    "Transaction",
    "TransactionStatus",
]
