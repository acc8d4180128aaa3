"""
backend/marketplace/services/events.py

Event emitter: pushes booking lifecycle events to a Redis queue for
consumption by the notification workers.

Queue:
- events:p2p: instant delivery (booking notifications to specific users)
"""

import json
import time
import logging

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


class EventEmitter:
    """Best-effort publisher; a failed push is logged, never raised."""

    def __init__(self, redis: Redis | None, queue: str = P2P_QUEUE):
        self.redis = redis
        self.queue = queue

    def emit(self, event_type: str, payload: dict) -> bool:
        """
        Emit a p2p event.

        Returns:
            True when the event was pushed.
        """
        if self.redis is None:
            return False

        event = {
            "type": event_type,
            **payload,
            "ts": int(time.time()),
        }
        try:
            self.redis.rpush(self.queue, json.dumps(event))
            logger.info(f"Event emitted: {event_type} → {self.queue}")
            return True
        except RedisError as e:
            logger.error(f"Failed to emit event {event_type}: {e}")
            return False


def get_event_emitter() -> EventEmitter:
    """FastAPI dependency: emitter bound to the shared Redis client."""
    from ..config import settings

    if not settings.events_enabled:
        return EventEmitter(None)

    from ..redis_client import redis_client
    return EventEmitter(redis_client)
