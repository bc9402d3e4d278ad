import os
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# In-memory store and a known secret for every test
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("TRIPAY_PRIVATE_KEY", "test-private-key")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")


class RecordingNotifier:
    """Stands in for TelegramNotifier; records every send."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.sent: list[tuple[int, str]] = []
        self.fail_with = fail_with

    async def send(self, chat_id: int, text: str):
        from callback_server.services.notifications import NotificationResult
        self.sent.append((chat_id, text))
        if self.fail_with is not None:
            raise self.fail_with
        return NotificationResult(delivered=True)


@pytest.fixture
def repository():
    from callback_server.repositories.memory import InMemoryLedgerRepository
    return InMemoryLedgerRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app(repository, notifier):
    from callback_server.deps import get_notifier, get_repository
    from callback_server.main import app
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
