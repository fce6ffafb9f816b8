# Filename: telegram_alert.py

import asyncio
import re
import requests
import logging

from models import LaunchFact, PoolMetrics

logger = logging.getLogger("TelegramNotifier")

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
MARKDOWN_V2_RESERVED = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown_v2(value) -> str:
    """Prefix every MarkdownV2 reserved character with a backslash."""
    return MARKDOWN_V2_RESERVED.sub(r"\\\1", str(value))


def format_launch_confirmed(fact: LaunchFact) -> str:
    e = escape_markdown_v2
    return (
        f"✅ *New token launch confirmed* ✅\n\n"
        f"*Source:* {e(fact.source)}\n"
        f"*Ticker:* {e(fact.token)}\n"
        f"*Issuer:* {e(fact.issuer)}\n"
        f"*Total Supply:* {e(fact.supply)}\n"
        f"*Date:* {e(fact.timestamp)}\n\n"
        f"⏳ Waiting for AMM pool\\.\\.\\. ⏳"
    )


def format_pool_live(token: str, metrics: PoolMetrics) -> str:
    e = escape_markdown_v2
    price = f"{metrics.initial_price:.6g}"
    liquidity = f"{metrics.liquidity.normalize():,f}"
    pool_supply = f"{metrics.pool_supply.normalize():,f}"
    dev_allocation = f"{metrics.dev_allocation_percent:.2f}"

    return f"""
🚀 *AMM Pool is LIVE\\!* 🚀

*Token:* {e(token)}
*Initial Price:* {e(price)} XRP
*Liquidity:* {e(liquidity)} XRP
*Pool Supply:* {e(pool_supply)} {e(token)}
*Dev Allocation:* {e(dev_allocation)}%

Let's trade\\! 💰
    """.strip()


class TelegramNotifier:
    def __init__(self, bot_token: str, chat_id: str, max_attempts: int = 1, retry_delay: float = 1.0):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay

        if not self.bot_token or not self.chat_id:
            logger.error("[Telegram] Missing bot token or chat ID!")

    def send_markdown(self, text: str) -> bool:
        """
        Sends a message already formatted as MarkdownV2.
        Failures are logged, never raised.
        """
        if not self.bot_token or not self.chat_id:
            logger.warning("[Telegram] Not configured, message dropped.")
            return False

        url = TELEGRAM_API_URL.format(token=self.bot_token)
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "MarkdownV2"
        }

        try:
            response = requests.post(url, json=payload, timeout=10)
            if response.status_code != 200:
                logger.error(f"[Telegram] Failed: {response.status_code} - {response.text}")
                return False
            logger.info("[Telegram] ✅ Message sent successfully.")
            return True
        except requests.RequestException as e:
            logger.error(f"[Telegram] Request exception: {e}")
            return False

    async def notify(self, text: str) -> bool:
        """
        Sends a MarkdownV2 message from the event loop.
        Retries with exponential delay when max_attempts > 1.
        """
        delay = self.retry_delay
        for attempt in range(1, self.max_attempts + 1):
            if await asyncio.to_thread(self.send_markdown, text):
                return True
            if attempt < self.max_attempts:
                logger.warning(f"[Telegram] Send failed, retrying ({attempt}/{self.max_attempts - 1})")
                await asyncio.sleep(delay)
                delay *= 2
        return False
