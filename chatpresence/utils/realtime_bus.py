import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from chatpresence.core.config import settings


logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], Awaitable[None]]

RETRY_DELAY_SECONDS = 0.5


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


class NoopBus:

    enabled = False

    async def publish(self, channel: str, message: str) -> None:
        return

    async def subscribe(self, channel: str, on_message: MessageHandler) -> "NoopSubscription":
        return NoopSubscription()

    async def close(self) -> None:
        return


class NoopSubscription:

    def start(self) -> None:
        return

    async def cancel(self) -> None:
        return


class RedisSubscription:

    def __init__(self, pubsub, channel: str, on_message: MessageHandler) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._on_message = on_message
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def run(self) -> None:
        while True:
            try:
                msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            except RedisError as exc:
                logger.warning("Redis subscription on %s failed: %s", self._channel, exc)
                await asyncio.sleep(RETRY_DELAY_SECONDS)
                continue
            if not msg or msg.get("type") != "message":
                continue
            data = msg.get("data")
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            try:
                await self._on_message(data)
            except Exception as exc:
                # receiver socket is gone; stop forwarding
                logger.warning("Stopped forwarding %s: %s", self._channel, exc)
                return

    async def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        try:
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        except RedisError as exc:
            logger.debug("Unsubscribe from %s failed: %s", self._channel, exc)


class RedisBus:

    enabled = True

    def __init__(self, url: str) -> None:
        self._redis = redis.from_url(url)

    async def publish(self, channel: str, message: str) -> None:
        await self._redis.publish(channel, message)

    async def subscribe(self, channel: str, on_message: MessageHandler) -> RedisSubscription:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        return RedisSubscription(pubsub, channel, on_message)

    async def close(self) -> None:
        await self._redis.aclose()


_bus = None


async def get_bus():
    global _bus
    if _bus is not None:
        return _bus
    if not settings.redis_url:
        logger.info("REDIS_URL not set, typing events stay in-process")
        _bus = NoopBus()
        return _bus
    _bus = RedisBus(settings.redis_url)
    return _bus


async def close_bus() -> None:
    global _bus
    bus = _bus
    _bus = None
    if bus is not None:
        await bus.close()
