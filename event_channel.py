import asyncio
import logging
from typing import Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from models import LaunchFact

logger = logging.getLogger("EventChannel")

DEFAULT_TOPIC = "newtokens"


class EventChannel:
    """Redis pub/sub carrying LaunchFacts between the two stages."""

    def __init__(self, redis: Redis, topic: str = DEFAULT_TOPIC, publish_timeout: float = 5.0):
        self.redis = redis
        self.topic = topic
        self.publish_timeout = publish_timeout
        self._pubsub = None

    @classmethod
    def from_url(cls, url: str, topic: str = DEFAULT_TOPIC, publish_timeout: float = 5.0,
                 connect_timeout: float = 5.0) -> "EventChannel":
        return cls(Redis.from_url(url, socket_connect_timeout=connect_timeout), topic, publish_timeout)

    async def ping(self):
        await self.redis.ping()

    async def publish(self, fact: LaunchFact) -> int:
        """
        Returns the number of subscribers that received the message.
        Raises asyncio.TimeoutError when the broker does not answer in time.
        """
        receivers = await asyncio.wait_for(self.redis.publish(self.topic, fact.to_json()),
                                           timeout=self.publish_timeout)
        logger.info(f"[Redis] Published {fact.token} to '{self.topic}' ({receivers} subscriber(s))")
        return receivers

    async def listen(self, on_message: Callable[[bytes], None], reconnect_delay: float = 5):
        """Deliver every payload published on the topic until cancelled."""
        while True:
            try:
                self._pubsub = self.redis.pubsub()
                await self._pubsub.subscribe(self.topic)
                logger.info(f"[Redis] Subscribed to '{self.topic}'. Waiting for new tokens...")
                async for message in self._pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    on_message(message.get("data"))
            except RedisError as e:
                logger.error(f"[Redis] Subscription error: {e}")
            finally:
                await self._close_pubsub()
            await asyncio.sleep(reconnect_delay)

    async def _close_pubsub(self):
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is not None:
            try:
                await pubsub.aclose()
            except RedisError as e:
                logger.warning(f"[Redis] Failed to close subscription: {e}")

    async def close(self):
        await self._close_pubsub()
        await self.redis.aclose()
        logger.info("[Redis] Connection closed")
