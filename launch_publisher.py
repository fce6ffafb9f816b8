# launch_publisher.py

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from redis.exceptions import RedisError

from announcement_parser import parse_announcement
from event_channel import EventChannel
from models import LaunchFact, SOURCE_TAG
from telegram_alert import TelegramNotifier, format_launch_confirmed

logger = logging.getLogger("LaunchPublisher")


@dataclass
class PublishResult:
    """Outcome of handling one inbound announcement."""
    matched: bool = False
    published: bool = False
    notified: bool = False
    error: str = ""
    fact: Optional[LaunchFact] = None


class LaunchPublisher:
    def __init__(self, event_channel: EventChannel, notifier: Optional[TelegramNotifier], channel_id: int):
        self.event_channel = event_channel
        self.notifier = notifier
        self.channel_id = int(channel_id)
        self.stats = {
            "seen": 0,
            "matched": 0,
            "published": 0,
            "publish_failures": 0,
            "notify_failures": 0
        }

    async def handle_message(self, text: Optional[str], channel_id: Optional[int]) -> PublishResult:
        if channel_id is None or int(channel_id) != self.channel_id or not text:
            return PublishResult()

        self.stats["seen"] += 1
        logger.info(f"New message detected from the monitored channel: {text!r}")

        parsed = parse_announcement(text)
        if not parsed:
            return PublishResult()

        self.stats["matched"] += 1
        fact = LaunchFact(
            token=parsed.token,
            issuer=parsed.issuer,
            supply=parsed.supply,
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=SOURCE_TAG
        )
        result = PublishResult(matched=True, fact=fact)
        logger.info(f"Launch detected: {fact}")

        # Publish and notify run concurrently, neither waits on the other
        await asyncio.gather(self._publish(fact, result), self._notify(fact, result))
        return result

    async def _publish(self, fact: LaunchFact, result: PublishResult):
        try:
            await self.event_channel.publish(fact)
            result.published = True
            self.stats["published"] += 1
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            self.stats["publish_failures"] += 1
            result.error = f"publish failed: {e!r}"
            logger.error(f"Failed to publish {fact.token} to the event channel: {e!r}")

    async def _notify(self, fact: LaunchFact, result: PublishResult):
        if not self.notifier:
            return
        result.notified = await self.notifier.notify(format_launch_confirmed(fact))
        if not result.notified:
            self.stats["notify_failures"] += 1
            logger.error(f"Launch notification for {fact.token} was not delivered")

    def get_statistics(self) -> dict:
        return dict(self.stats)
