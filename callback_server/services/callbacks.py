"""Payment callback handling: authenticate, filter, settle, notify."""

from enum import Enum

import orjson

from callback_server.core.exceptions import BadRequestError, InvalidSignatureError
from callback_server.core.logging import get_logger
from callback_server.core.security import verify_signature
from callback_server.repositories.base import LedgerRepository
from callback_server.services.events import EventDecision, classify_event
from callback_server.services.ledger import SettlementOutcome, settle
from callback_server.services.notifications import NotificationResult, TelegramNotifier, settlement_message

log = get_logger(__name__)


class CallbackOutcome(str, Enum):
    IGNORED = "ignored"
    NO_MATCH = "no_match"
    DATA_INTEGRITY_FAULT = "data_integrity_fault"
    ACKNOWLEDGED = "acknowledged"


async def handle_callback(
    body: bytes,
    signature: str | None,
    event_type: str | None,
    *,
    secret: str,
    repository: LedgerRepository,
    notifier: TelegramNotifier,
) -> CallbackOutcome:
    """
    Run one callback through the pipeline.

    Raises InvalidSignatureError before touching the store when the body is not
    signed with `secret`. Past that point only StoreUnavailableError escapes;
    notification failures are logged and dropped.
    """
    if not verify_signature(body, signature, secret):
        log.warning("callback_rejected", reason="invalid_signature", event_type=event_type)
        raise InvalidSignatureError()

    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        log.warning("callback_rejected", reason="invalid_json", event_type=event_type)
        raise BadRequestError("Invalid payload") from exc

    if classify_event(event_type, payload) is EventDecision.IGNORED:
        status = payload.get("status") if isinstance(payload, dict) else None
        log.info("callback_ignored", event_type=event_type, status=status)
        return CallbackOutcome.IGNORED

    merchant_ref = payload.get("merchant_ref")
    if not isinstance(merchant_ref, str) or not merchant_ref:
        log.warning("callback_missing_reference", event_type=event_type)
        return CallbackOutcome.NO_MATCH

    result = await settle(repository, merchant_ref)
    if result.outcome is SettlementOutcome.NO_MATCH:
        return CallbackOutcome.NO_MATCH
    if result.outcome is SettlementOutcome.DATA_INTEGRITY_FAULT:
        return CallbackOutcome.DATA_INTEGRITY_FAULT

    text = settlement_message(result.transaction.amount, result.user.balance)
    try:
        notification = await notifier.send(result.user.telegram_id, text)
    except Exception as exc:
        log.exception("notification_failed", merchant_ref=merchant_ref, chat_id=result.user.telegram_id)
        notification = NotificationResult(delivered=False, error=str(exc))
    log.info("callback_settled", merchant_ref=merchant_ref, notified=notification.delivered)
    return CallbackOutcome.ACKNOWLEDGED
