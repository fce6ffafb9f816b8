import logging

from telethon import TelegramClient, events
from telethon.sessions import StringSession

from launch_publisher import LaunchPublisher

logger = logging.getLogger("AnnouncementListener")


def message_channel_id(message):
    """Numeric channel id of a message, None for chats and users."""
    peer = getattr(message, "peer_id", None)
    return getattr(peer, "channel_id", None)


class AnnouncementListener:
    """
    Feeds new posts of one Telegram channel into the LaunchPublisher,
    using an existing user session string.
    """

    def __init__(self, api_id: int, api_hash: str, session_string: str, channel_username: str,
                 publisher_factory):
        self.channel_username = channel_username
        self.publisher_factory = publisher_factory
        self.publisher: LaunchPublisher = None
        self.client = TelegramClient(StringSession(session_string), api_id, api_hash, connection_retries=5)

    async def start(self) -> bool:
        """
        Connects with the saved session and starts forwarding channel posts.
        Returns False when the session is not authorized; never prompts for a login.
        """
        await self.client.connect()
        if not await self.client.is_user_authorized():
            await self.client.disconnect()
            return False
        logger.info("Client started successfully using saved session.")

        channel = await self.client.get_entity(self.channel_username)
        self.publisher = self.publisher_factory(channel.id)
        self.client.add_event_handler(self._on_new_message, events.NewMessage())
        logger.info(f"Monitoring channel: {self.channel_username} (id={channel.id})")
        return True

    async def _on_new_message(self, event):
        message = event.message
        if message is None:
            return
        try:
            await self.publisher.handle_message(message.message, message_channel_id(message))
        except Exception as e:
            logger.exception(f"Failed to handle message {getattr(message, 'id', '?')}: {e}")

    async def run_until_disconnected(self):
        await self.client.run_until_disconnected()

    async def disconnect(self):
        await self.client.disconnect()
        logger.info("Telegram client disconnected")
