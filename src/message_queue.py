import threading
from queue import Queue, Full
from typing import Optional

from config import DEFAULT_QUEUE_CAPACITY
from models import Record


class InMemoryQueue:
    """
    Bounded FIFO channel between one publisher and one consumer.
    Publishing blocks while the queue is full. All synchronization is internal.
    """

    DEFAULT_TIMEOUT = 0.1

    _END_OF_STREAM = object()

    def __init__(self, capacity: int = DEFAULT_QUEUE_CAPACITY):
        self._main_queue: Queue = Queue(maxsize=capacity)
        self._closed_event = threading.Event()
        self._aborted_event = threading.Event()
        self._drained = False

    def publish_message(self, message: Record) -> bool:
        """
        Add message to the queue, waiting for capacity if needed.
        Returns False if the consumer aborted and the message was not enqueued.
        """
        if self._closed_event.is_set():
            raise RuntimeError("cannot publish to a closed queue")
        return self._put(message)

    def close(self) -> None:
        """Signal no more messages will be published."""
        if not self._closed_event.is_set():
            self._closed_event.set()
            self._put(self._END_OF_STREAM)

    def consume_message(self) -> Optional[Record]:
        """
        Get next message, blocking until one is available.
        Returns None once the queue is closed and fully drained.
        """
        if self._drained:
            return None
        message = self._main_queue.get()
        if message is self._END_OF_STREAM:
            self._drained = True
            return None
        return message

    def abort(self) -> None:
        """Consumer gave up; unblock and stop the publisher."""
        self._aborted_event.set()

    def is_aborted(self) -> bool:
        return self._aborted_event.is_set()

    def is_closed(self) -> bool:
        return self._closed_event.is_set()

    def is_empty(self) -> bool:
        """Check if no messages are waiting (end-of-stream marker excluded)."""
        return self.size() == 0

    def size(self) -> int:
        """Return approximate number of waiting messages."""
        size = self._main_queue.qsize()
        if self._closed_event.is_set() and not self._drained:
            size -= 1
        return max(size, 0)

    def _put(self, message) -> bool:
        while not self._aborted_event.is_set():
            try:
                self._main_queue.put(message, timeout=self.DEFAULT_TIMEOUT)
                return True
            except Full:
                continue
        return False
