"""
Change Feed for the trivia backend.

One subscription abstraction for every viewer of game state. Managers
publish after each committed write; subscribers (the Socket.IO bridge,
tests) get a ChangeEvent per write. Delivery is at-least-once: a push
that a viewer misses is covered by the periodic reconciliation pass,
which publishes a 'sync' event for every table.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Any

from utils.constants import FEED_TABLES, FEED_ACTIONS

logger = logging.getLogger(__name__)

@dataclass
class ChangeEvent:
    """A committed change to one table."""
    table: str
    action: str
    sequence: int
    record_id: Optional[str] = None
    player_id: Optional[str] = None  # Lets per-player subscribers filter answers
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'table': self.table,
            'action': self.action,
            'sequence': self.sequence,
            'record_id': self.record_id,
            'player_id': self.player_id,
            'emitted_at': self.emitted_at.isoformat()
        }

Subscriber = Callable[[ChangeEvent], None]

class ChangeFeed:
    """In-process publish/subscribe hub keyed by table name."""

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {table: [] for table in FEED_TABLES}
        self._sequence = 0
        self._lock = threading.Lock()
        logger.debug("Change feed initialized")

    def subscribe(self, table: str, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for changes to a table.

        Args:
            table: One of FEED_TABLES
            callback: Called with each ChangeEvent

        Returns:
            Function that removes the subscription
        """
        if table not in self._subscribers:
            raise ValueError(f"Unknown table '{table}'")

        with self._lock:
            self._subscribers[table].append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers[table]:
                    self._subscribers[table].remove(callback)

        return unsubscribe

    def publish(self, table: str, action: str, record_id: Optional[str] = None,
                player_id: Optional[str] = None) -> ChangeEvent:
        """Deliver a change to every subscriber of the table."""
        with self._lock:
            self._sequence += 1
            event = ChangeEvent(table=table, action=action, sequence=self._sequence,
                                record_id=record_id, player_id=player_id)
            subscribers = list(self._subscribers.get(table, []))

        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                # The write is already committed; the next sync pass covers this viewer
                logger.error(f"Change feed subscriber failed for {table}/{action}: {e}")

        logger.debug(f"Published {table}/{action} #{event.sequence} to {len(subscribers)} subscribers")
        return event

    def publish_sync(self) -> List[ChangeEvent]:
        """Reconciliation pass: tell every subscriber to re-read its table."""
        return [self.publish(table, FEED_ACTIONS['SYNC']) for table in FEED_TABLES]

    @property
    def last_sequence(self) -> int:
        return self._sequence

class ReconciliationLoop:
    """
    Periodic fallback poll.

    Runs publish_sync() every interval on a background task supplied by
    the caller (Socket.IO's start_background_task/sleep in production).
    """

    def __init__(self, change_feed: ChangeFeed, interval_seconds: int = 30):
        self.change_feed = change_feed
        self.interval_seconds = interval_seconds
        self.running = False

    def run(self, sleep: Callable[[float], Any]):
        """Loop until stop() is called."""
        self.running = True
        logger.info(f"Reconciliation loop started ({self.interval_seconds}s interval)")
        while self.running:
            sleep(self.interval_seconds)
            if not self.running:
                break
            self.change_feed.publish_sync()
        logger.info("Reconciliation loop stopped")

    def stop(self):
        self.running = False
