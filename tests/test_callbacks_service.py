"""handle_callback outcomes on the reject and ignore paths."""

import orjson
import pytest

from callback_server.core.exceptions import BadRequestError, InvalidSignatureError
from callback_server.core.security import compute_signature
from callback_server.services.callbacks import CallbackOutcome, handle_callback

pytestmark = pytest.mark.asyncio

SECRET = "service-test-key"


async def _handle(body: bytes, event_type: str | None, repository, notifier, signature: str | None = None):
    return await handle_callback(
        body,
        signature if signature is not None else compute_signature(body, SECRET),
        event_type,
        secret=SECRET,
        repository=repository,
        notifier=notifier,
    )


async def test_bad_signature_raises_invalid_signature(repository, notifier):
    body = orjson.dumps({"merchant_ref": "ABC123", "status": "PAID"})
    with pytest.raises(InvalidSignatureError):
        await _handle(body, "payment_status", repository, notifier, signature="00")


async def test_missing_signature_raises_invalid_signature(repository, notifier):
    body = orjson.dumps({"merchant_ref": "ABC123", "status": "PAID"})
    with pytest.raises(InvalidSignatureError):
        await handle_callback(
            body, None, "payment_status", secret=SECRET, repository=repository, notifier=notifier
        )


async def test_unpaid_status_is_ignored(repository, notifier):
    body = orjson.dumps({"merchant_ref": "ABC123", "status": "UNPAID"})
    assert await _handle(body, "payment_status", repository, notifier) is CallbackOutcome.IGNORED


async def test_other_event_is_ignored(repository, notifier):
    body = orjson.dumps({"merchant_ref": "ABC123", "status": "PAID"})
    assert await _handle(body, "payment_refund", repository, notifier) is CallbackOutcome.IGNORED


async def test_signed_non_json_raises_bad_request(repository, notifier):
    with pytest.raises(BadRequestError):
        await _handle(b"not json", "payment_status", repository, notifier)


async def test_missing_reference_is_no_match(repository, notifier):
    body = orjson.dumps({"status": "PAID"})
    assert await _handle(body, "payment_status", repository, notifier) is CallbackOutcome.NO_MATCH
    assert notifier.sent == []


async def test_paid_event_settles(repository, notifier):
    user = repository.add_user(telegram_id=7, balance=10000)
    repository.add_transaction("ABC123", user.id, 50000)
    body = orjson.dumps({"merchant_ref": "ABC123", "status": "PAID"})

    assert await _handle(body, "payment_status", repository, notifier) is CallbackOutcome.ACKNOWLEDGED
    assert repository.users[user.id].balance == 60000
    assert notifier.sent[0][0] == 7
