"""
MQTT bridge for the snowfall display.

Features:
- Worker commands published as JSON (fire-and-forget)
- Preference sync between instances (retained topic, own echoes ignored)
- Auto-reconnection on connection loss
- Last Will and Testament (LWT) for availability
"""

import asyncio
import json
from typing import Optional, Sequence
from contextlib import AsyncExitStack

import aiomqtt
from snowfall.config import (
    MQTT_ENABLED,
    MQTT_BROKER,
    MQTT_PORT,
    MQTT_USERNAME,
    MQTT_PASSWORD,
    MQTT_CLIENT_ID,
    STORAGE_KEY,
)
from snowfall.logger import logger
from snowfall.orchestrator import PREFERENCE_VALUES
from snowfall.page import OffscreenSurface
from snowfall.preferences import OriginStorage
from snowfall.worker import WorkerMessage


# ============================================================================
# MQTT Topics
# ============================================================================

TOPIC_WORKER = f"snowfall/{MQTT_CLIENT_ID}/worker"
TOPIC_PREFERENCE = f"snowfall/preference/{STORAGE_KEY}"
TOPIC_AVAILABILITY = f"snowfall/{MQTT_CLIENT_ID}/availability"


def build_preference_payload(key: str, value: str) -> str:
    return json.dumps({"key": key, "value": value, "origin": MQTT_CLIENT_ID})


# ============================================================================
# MQTTService Class
# ============================================================================

class MQTTService:
    """
    MQTT service for worker commands and preference sync.

    Runs as FastAPI lifespan background task. Synchronous callers hand
    messages over through enqueue(), which is thread-safe.
    """

    def __init__(self, storage: OriginStorage):
        """
        Initialize MQTT service.

        Args:
            storage: Origin storage whose local writes are published and
                     which receives preference changes from other instances
        """
        self.storage = storage
        self.client: Optional[aiomqtt.Client] = None
        self.running = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.outbox: Optional[asyncio.Queue] = None

        storage.on_local_write(self._publish_preference)

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to the event loop that will run start()."""
        self.loop = loop
        self.outbox = asyncio.Queue()

    async def start(self):
        """Start MQTT service (runs until cancelled)."""
        if not MQTT_ENABLED:
            logger.info("MQTT is disabled in configuration")
            return

        if self.loop is None:
            self.bind(asyncio.get_running_loop())

        self.running = True
        logger.info(f"Starting MQTT service: broker={MQTT_BROKER}:{MQTT_PORT}, client_id={MQTT_CLIENT_ID}")

        reconnect_interval = 5  # seconds

        while self.running:
            try:
                async with AsyncExitStack() as stack:
                    will = aiomqtt.Will(
                        topic=TOPIC_AVAILABILITY,
                        payload="offline",
                        qos=1,
                        retain=True,
                    )

                    self.client = aiomqtt.Client(
                        hostname=MQTT_BROKER,
                        port=MQTT_PORT,
                        username=MQTT_USERNAME,
                        password=MQTT_PASSWORD,
                        identifier=MQTT_CLIENT_ID,
                        will=will,
                    )

                    await stack.enter_async_context(self.client)
                    logger.info("Connected to MQTT broker")

                    await self.client.publish(
                        TOPIC_AVAILABILITY,
                        payload="online",
                        qos=1,
                        retain=True,
                    )

                    await self.client.subscribe(TOPIC_PREFERENCE, qos=1)
                    logger.info("Subscribed to preference topic")

                    reconnect_interval = 5

                    drain_task = asyncio.create_task(self._drain_outbox())
                    try:
                        async for message in self.client.messages:
                            await self._handle_message(message)
                    finally:
                        drain_task.cancel()

            except aiomqtt.MqttError as e:
                logger.error(f"MQTT connection error: {e}", exc_info=True)
                if self.running:
                    logger.info(f"Reconnecting in {reconnect_interval} seconds...")
                    await asyncio.sleep(reconnect_interval)
                    reconnect_interval = min(reconnect_interval * 2, 60)  # Max 60s

            except asyncio.CancelledError:
                logger.info("MQTT service cancelled")
                break

        self.running = False
        logger.info("MQTT service stopped")

    async def stop(self):
        """Stop MQTT service."""
        logger.info("Stopping MQTT service...")
        self.running = False

    # ------------------------------------------------------------------------
    # Outgoing messages
    # ------------------------------------------------------------------------

    def enqueue(self, topic: str, payload: str, retain: bool = False) -> bool:
        """
        Queue a message for publishing from any thread.

        Returns:
            False if the service has no event loop yet (message dropped)
        """
        if self.loop is None or self.outbox is None or self.loop.is_closed():
            logger.warning(f"Cannot queue MQTT message for {topic}: service not bound to an event loop")
            return False

        self.loop.call_soon_threadsafe(self.outbox.put_nowait, (topic, payload, retain))
        return True

    async def _drain_outbox(self):
        while True:
            topic, payload, retain = await self.outbox.get()
            try:
                await self.client.publish(topic, payload=payload, qos=1, retain=retain)
                logger.debug(f"Published to {topic}: {payload}")
            except aiomqtt.MqttError as e:
                logger.error(f"Failed to publish to {topic}: {e}")

    def _publish_preference(self, key: str, value: str) -> None:
        self.enqueue(TOPIC_PREFERENCE, build_preference_payload(key, value), retain=True)

    # ------------------------------------------------------------------------
    # Message Handling
    # ------------------------------------------------------------------------

    async def _handle_message(self, message: aiomqtt.Message):
        """
        Handle incoming MQTT message.

        Preference payload format (JSON):
        {"key": "snow", "value": "snowfall" | "none", "origin": "<client id>"}
        """
        topic = str(message.topic)
        payload = message.payload.decode()
        logger.debug(f"MQTT message received: topic={topic}, payload={payload}")

        if topic != TOPIC_PREFERENCE:
            logger.warning(f"Unknown MQTT topic: {topic}")
            return

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in preference message: {e}")
            return

        if not isinstance(data, dict) or data.get("origin") == MQTT_CLIENT_ID:
            return

        key = data.get("key", STORAGE_KEY)
        value = data.get("value")
        if not isinstance(value, str):
            logger.warning(f"Ignoring preference message without value: {payload}")
            return

        if key == STORAGE_KEY and value not in PREFERENCE_VALUES:
            logger.warning(f"Ignoring unknown snow preference from {data.get('origin')}: {value!r}")
            return

        logger.info(f"Preference changed by {data.get('origin')}: {key}={value}")
        self.storage.apply_external(key, value)


class MQTTWorkerPort:
    """Worker port that publishes each message to the worker topic."""

    def __init__(self, service: MQTTService, topic: str = TOPIC_WORKER):
        self.service = service
        self.topic = topic

    def post_message(self, message: WorkerMessage, transfer: Sequence[OffscreenSurface] = ()) -> None:
        self.service.enqueue(self.topic, json.dumps(message.to_payload()))


# ============================================================================
# Global Instance (initialized in main.py)
# ============================================================================

mqtt_service: Optional[MQTTService] = None


def init_mqtt_service(storage: OriginStorage) -> MQTTService:
    """
    Initialize global MQTT service instance.

    Args:
        storage: Origin storage to keep in sync

    Returns:
        MQTTService instance
    """
    global mqtt_service
    mqtt_service = MQTTService(storage)
    return mqtt_service
