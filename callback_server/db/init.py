import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from callback_server.core.config import Settings
from callback_server.models.transaction import Transaction
from callback_server.models.user import User

DOCUMENT_MODELS = [
    User,
    Transaction,
]


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


async def init_db(settings: Settings) -> AsyncIOMotorClient:
    """Connect, register document models and return the client for session use."""
    kwargs = {}
    if _use_tls(settings.mongodb_uri):
        kwargs["tlsCAFile"] = certifi.where()
        kwargs["tlsDisableOCSPEndpointCheck"] = True
    client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
    database = client[settings.mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    return client
