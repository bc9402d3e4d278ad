from fastapi import APIRouter, Depends, Header, Request

from callback_server.core.config import Settings, get_settings
from callback_server.deps import get_notifier, get_repository
from callback_server.repositories.base import LedgerRepository
from callback_server.services import callbacks as callbacks_service
from callback_server.services.notifications import TelegramNotifier

router = APIRouter()


@router.post("/callback")
async def payment_callback(
    request: Request,
    x_callback_signature: str | None = Header(None, alias="X-Callback-Signature"),
    x_callback_event: str | None = Header(None, alias="X-Callback-Event"),
    settings: Settings = Depends(get_settings),
    repository: LedgerRepository = Depends(get_repository),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Tripay payment_status callback -> settle once, notify, acknowledge."""
    body = await request.body()
    outcome = await callbacks_service.handle_callback(
        body,
        x_callback_signature,
        x_callback_event,
        secret=settings.tripay_private_key,
        repository=repository,
        notifier=notifier,
    )
    if outcome is callbacks_service.CallbackOutcome.IGNORED:
        return {"success": True, "message": "Event ignored"}
    return {"success": True}
