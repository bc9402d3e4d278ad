"""Telegram confirmation messages. Best-effort: failures are returned, never raised."""

from dataclasses import dataclass

import httpx

from callback_server.core.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    delivered: bool
    error: str | None = None


def format_amount(amount: int) -> str:
    """id-ID grouping of an int amount in minor units: 60000 -> '60.000'."""
    if not isinstance(amount, int):
        raise TypeError(f"amount must be int minor units, got {type(amount).__name__}")
    return f"{amount:,}".replace(",", ".")


def settlement_message(amount: int, balance: int) -> str:
    return (
        "🎉 Payment successful!\n\n"
        f"Deposit of *Rp {format_amount(amount)}* received, "
        f"new balance *Rp {format_amount(balance)}*"
    )


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def send(self, chat_id: int, text: str) -> NotificationResult:
        if not self.bot_token:
            log.warning("notification_failed", chat_id=chat_id, error="bot token not configured")
            return NotificationResult(delivered=False, error="bot token not configured")
        url = f"{self.api_base}/bot{self.bot_token}/sendMessage"
        body = {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"}
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict) or not data.get("ok", False):
                description = data.get("description") if isinstance(data, dict) else None
                raise ValueError(description or "Telegram returned ok=false")
        except (httpx.HTTPError, ValueError) as exc:
            # Never log the URL: it embeds the bot token
            log.warning("notification_failed", chat_id=chat_id, error=type(exc).__name__, detail=_describe(exc))
            return NotificationResult(delivered=False, error=_describe(exc))
        log.info("notification_sent", chat_id=chat_id)
        return NotificationResult(delivered=True)


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.HTTPError):
        return type(exc).__name__
    return str(exc)
