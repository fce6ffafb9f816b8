# Filename: main.py

import argparse
import asyncio
import logging
import signal
import sys

from announcement_listener import AnnouncementListener
from config import load_config
from event_channel import EventChannel
from launch_publisher import LaunchPublisher
from ledger_listener import LedgerListener
from pool_watcher import PoolWatcher
from telegram_alert import TelegramNotifier
from token_cache import PendingWatchSet

logger = logging.getLogger("Main")


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def build_notifier(config):
    return TelegramNotifier(
        config["BOT_TOKEN"],
        config["BOT_CHAT_ID"],
        max_attempts=config.get("NOTIFY_MAX_ATTEMPTS", 1),
        retry_delay=config.get("NOTIFY_RETRY_DELAY", 1.0)
    )


def build_event_channel(config):
    return EventChannel.from_url(
        config["REDIS_URL"],
        config.get("EVENT_TOPIC", "newtokens"),
        publish_timeout=config.get("REDIS_PUBLISH_TIMEOUT", 5.0),
        connect_timeout=config.get("REDIS_CONNECT_TIMEOUT", 5.0)
    )


def install_stop_handlers(stop_event: asyncio.Event):
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: KeyboardInterrupt still stops asyncio.run
            pass


async def run_publisher(config) -> int:
    if not config.get("SESSION_STRING"):
        logger.error("SESSION_STRING not found in configuration.")
        logger.error("Please run the Telegram login flow first to generate a session string.")
        return 1

    logger.info("🚀 Starting launch publisher...")
    notifier = build_notifier(config)
    channel = build_event_channel(config)
    listener = AnnouncementListener(
        api_id=int(config["API_ID"]),
        api_hash=config["API_HASH"],
        session_string=config["SESSION_STRING"],
        channel_username=config["CHANNEL_USERNAME"],
        publisher_factory=lambda channel_id: LaunchPublisher(channel, notifier, channel_id)
    )

    try:
        authorized = await listener.start()
    except Exception as e:
        logger.exception(f"Failed to start the client: {e}")
        await channel.close()
        return 1

    if not authorized:
        logger.error("SESSION_STRING is not authorized (revoked or invalid).")
        logger.error("Please run the Telegram login flow first to generate a session string.")
        await channel.close()
        return 1

    stop_event = asyncio.Event()
    install_stop_handlers(stop_event)
    logger.info("Waiting for new messages...")

    client_task = asyncio.create_task(listener.run_until_disconnected())
    stop_task = asyncio.create_task(stop_event.wait())
    await asyncio.wait({client_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    logger.info("🛑 Shutting down launch publisher...")
    stop_task.cancel()
    await listener.disconnect()
    await channel.close()
    logger.info(f"Publisher statistics: {listener.publisher.get_statistics()}")
    return 0


async def run_watcher(config) -> int:
    logger.info("🚀 Starting AMM pool watcher...")
    notifier = build_notifier(config)
    channel = build_event_channel(config)
    watcher = PoolWatcher(
        ledger=None,
        notifier=notifier,
        watch_set=PendingWatchSet(max_lifetime=config.get("WATCH_TTL_SECONDS", 3 * 3600)),
        query_attempts=config.get("LEDGER_QUERY_MAX_ATTEMPTS", 1)
    )
    ledger = LedgerListener(
        config["XRPL_WEBSOCKET_URL"],
        on_transaction=watcher.handle_transaction,
        reconnect_delay=config.get("LEDGER_RECONNECT_DELAY", 5),
        query_timeout=config.get("LEDGER_QUERY_TIMEOUT", 10.0)
    )
    watcher.ledger = ledger

    try:
        await ledger.connect()
        await channel.ping()
    except Exception as e:
        logger.exception(f"Failed to connect to the ledger or the event channel: {e}")
        await ledger.disconnect()
        await channel.close()
        return 1

    stop_event = asyncio.Event()
    install_stop_handlers(stop_event)

    tasks = [
        asyncio.create_task(ledger.run()),
        asyncio.create_task(channel.listen(watcher.handle_launch_event)),
    ]
    if config.get("WATCH_TTL_SECONDS", 0) > 0:
        tasks.append(asyncio.create_task(watcher.run_expiry_loop(config.get("WATCH_CLEANUP_INTERVAL", 60))))

    stop_task = asyncio.create_task(stop_event.wait())
    done, _ = await asyncio.wait({stop_task, *tasks}, return_when=asyncio.FIRST_COMPLETED)

    exit_code = 0
    for task in done:
        if task is stop_task:
            continue
        exit_code = 1
        if task.cancelled():
            logger.error("A watcher task was cancelled unexpectedly")
        elif task.exception() is not None:
            logger.error(f"Watcher task failed: {task.exception()!r}", exc_info=task.exception())
        else:
            logger.error("A watcher task stopped unexpectedly")

    logger.info("🛑 Shutting down AMM listener...")
    stop_task.cancel()
    await ledger.disconnect()
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    await channel.close()
    logger.info(f"{len(watcher.watch_set)} pending watch(es) dropped")
    return exit_code


STAGES = {
    "publisher": run_publisher,
    "watcher": run_watcher,
}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="XRPL token launch alerts")
    parser.add_argument("stage", choices=sorted(STAGES), help="pipeline stage to run")
    parser.add_argument("--config", default="config.json", help="path to config.json")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.get("LOG_LEVEL", "INFO"))

    try:
        return asyncio.run(STAGES[args.stage](config))
    except KeyboardInterrupt:
        logger.info("❌ Stopped by user.")
        return 0


def publisher_entry():
    sys.exit(main(["publisher"] + sys.argv[1:]))


def watcher_entry():
    sys.exit(main(["watcher"] + sys.argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
