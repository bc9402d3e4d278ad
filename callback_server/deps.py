"""Shared FastAPI dependencies."""

from fastapi import Depends, Request

from callback_server.core.config import Settings, get_settings
from callback_server.repositories.base import LedgerRepository
from callback_server.services.notifications import TelegramNotifier


def get_repository(request: Request, settings: Settings = Depends(get_settings)) -> LedgerRepository:
    """Dependency: ledger repository for the configured store backend."""
    if settings.store_backend == "memory":
        return request.app.state.memory_repository
    from callback_server.repositories.mongo import MongoLedgerRepository
    return MongoLedgerRepository(request.app.state.mongo_client, settings.mongodb_use_transactions)


def get_notifier(settings: Settings = Depends(get_settings)) -> TelegramNotifier:
    return TelegramNotifier(
        settings.telegram_bot_token,
        api_base=settings.telegram_api_base,
        timeout=settings.notify_timeout_seconds,
    )
