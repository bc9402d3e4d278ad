"""Settlement: PENDING -> PAID exactly once, then credit the owner."""

from dataclasses import dataclass
from enum import Enum

from callback_server.core.logging import get_logger
from callback_server.repositories.base import LedgerRepository, TransactionRecord, UserRecord

log = get_logger(__name__)


class SettlementOutcome(str, Enum):
    SETTLED = "settled"
    NO_MATCH = "no_match"
    DATA_INTEGRITY_FAULT = "data_integrity_fault"


@dataclass(frozen=True)
class SettlementResult:
    outcome: SettlementOutcome
    transaction: TransactionRecord | None = None
    user: UserRecord | None = None


async def settle(repository: LedgerRepository, merchant_ref: str) -> SettlementResult:
    """
    Mark the pending transaction for `merchant_ref` as paid and credit its user.

    The status change is a conditional update, so under duplicate delivery only
    one caller gets the transaction back; every other caller sees NO_MATCH.
    Both writes share one unit of work when the repository supports it.
    Store failures propagate as StoreUnavailableError.
    """
    async with repository.atomic():
        transaction = await repository.find_pending_and_mark_paid(merchant_ref)
        if transaction is None:
            log.info("settlement_no_match", merchant_ref=merchant_ref)
            return SettlementResult(SettlementOutcome.NO_MATCH)

        user = await repository.credit_user(transaction.user_id, transaction.amount)
        if user is None:
            log.error(
                "settlement_orphaned_user",
                merchant_ref=merchant_ref,
                transaction_id=transaction.id,
                user_id=transaction.user_id,
                amount=transaction.amount,
            )
            return SettlementResult(SettlementOutcome.DATA_INTEGRITY_FAULT, transaction=transaction)

    log.info(
        "transaction_settled",
        merchant_ref=merchant_ref,
        user_id=user.id,
        amount=transaction.amount,
        balance=user.balance,
    )
    return SettlementResult(SettlementOutcome.SETTLED, transaction=transaction, user=user)
