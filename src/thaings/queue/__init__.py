"""Durable per-to-do message queue.

Storage is plain files so that a filesystem watcher can wake the daemon:

- ``pending/<key>`` is a zero-byte marker, present while the key may have
  unprocessed work. Discovery is O(pending), not O(all to-dos).
- ``to-dos/<key>/messages/<stamp>.json`` is an append-only message log.
- ``to-dos/<key>/processed`` holds the stamp of the last processed message.

Writers never mutate message files. The watermark and the marker change only
inside :meth:`QueueStore.commit`, which runs under the per-key lock.
"""

from thaings.queue.ids import validate_key
from thaings.queue.lock import KeyLock
from thaings.queue.markers import MarkerIndex
from thaings.queue.models import Message, Queue
from thaings.queue.store import QueueStore, format_stamp

__all__ = [
    "KeyLock",
    "MarkerIndex",
    "Message",
    "Queue",
    "QueueStore",
    "format_stamp",
    "validate_key",
]
