import asyncio
import time
from internal.logging import get_logger

FRAMES = "frames"
SESSIONS = "sessions"

class Subscriber:
    __slots__ = ("name", "queue", "topics", "created_at", "received", "dropped")

    def __init__(self, name, queue, topics=None):
        self.name = name
        self.queue = queue
        self.topics = topics or set()
        self.created_at = time.time()
        self.received = 0
        self.dropped = 0

    def wants(self, topic):
        return not self.topics or topic in self.topics

    def offer(self, item, topic):
        """Queue ``item``. A full queue sheds its oldest frame for a new frame; anything else is dropped."""
        if self.queue.full():
            if topic != FRAMES:
                self.dropped += 1
                return False
            self.queue.get_nowait()
            self.dropped += 1
        self.queue.put_nowait(item)
        self.received += 1
        return True

class EventBus:
    """Copy-on-write pub/sub for redraw frames and session notices.

    A display that falls behind sees the newest frames; session notices are
    never displaced by frames. ``publish_threadsafe`` lets a simulation
    worker thread publish onto the loop that owns the bus.
    """

    def __init__(self, queue_size=50):
        self._lock = asyncio.Lock()
        self._subscribers = {}
        self._subscribers_snapshot = []
        self._queue_size = queue_size
        self._log = get_logger()
        self.published = {}
        self.total_delivered = 0
        self.total_dropped = 0

    @property
    def total_published(self):
        return sum(self.published.values())

    async def subscribe(self, name, max_queue_size=None, topics=None):
        async with self._lock:
            if name in self._subscribers:
                return self._subscribers[name]
            subscriber = Subscriber(name, asyncio.Queue(maxsize=max_queue_size or self._queue_size),
                                    set(topics) if topics else set())
            self._subscribers[name] = subscriber
            self._subscribers_snapshot = list(self._subscribers.values())
            self._log.info("subscribed", subscriber=name, topics=sorted(subscriber.topics))
            return subscriber

    async def unsubscribe(self, name):
        async with self._lock:
            if self._subscribers.pop(name, None) is None:
                return False
            self._subscribers_snapshot = list(self._subscribers.values())
            self._log.info("unsubscribed", subscriber=name)
            return True

    async def publish(self, item, topic=""):
        delivered = 0
        for subscriber in self._subscribers_snapshot:
            if not subscriber.wants(topic):
                continue
            dropped_before = subscriber.dropped
            if subscriber.offer(item, topic):
                delivered += 1
            self.total_dropped += subscriber.dropped - dropped_before
        self.published[topic] = self.published.get(topic, 0) + 1
        self.total_delivered += delivered
        return delivered

    def publish_threadsafe(self, loop, item, topic=""):
        """Schedule ``publish`` on ``loop`` from another thread; returns the concurrent future."""
        return asyncio.run_coroutine_threadsafe(self.publish(item, topic), loop)

    def get_stats(self):
        return {
            "subscriber_count": len(self._subscribers_snapshot),
            "total_published": self.total_published,
            "published_by_topic": dict(self.published),
            "total_delivered": self.total_delivered,
            "total_dropped": self.total_dropped
        }

    async def get_subscriber_info(self):
        return [
            {   "name": subscriber.name,
                "topics": sorted(subscriber.topics),
                "queued": subscriber.queue.qsize(),
                "received": subscriber.received,
                "dropped": subscriber.dropped
            } for subscriber in self._subscribers_snapshot
        ]
