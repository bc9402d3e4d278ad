from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class User(Document):
    """Telegram account with a deposit balance in minor units."""
    telegram_id: Indexed(int, unique=True)
    balance: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
