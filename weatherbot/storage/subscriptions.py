"""
Subscriber persistence.
Keeps the set of subscribers in memory and rewrites the whole JSON file
on every change.
"""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Set

from ..errors import PersistenceError
from .models import Subscriber

logger = logging.getLogger(__name__)


class SubscriptionStore:
    """
    Owns the subscriber collection.

    All mutations go through add/remove, which persist the full set before
    returning. There is no file locking: two processes sharing one file
    can overwrite each other's changes.
    """

    def __init__(self, path: str):
        """
        Initialize the store and load the existing file.

        Args:
            path: Path to the JSON subscriber file
        """
        self.path = Path(path)
        self._subscribers: Set[Subscriber] = self.load()
        logger.info(f"Loaded {len(self._subscribers)} subscribers from {self.path}")

    def load(self) -> Set[Subscriber]:
        """
        Read the subscriber file.

        A missing or unreadable file yields an empty set.
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return set()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}, starting without subscribers: {e}")
            return set()

        if not isinstance(raw, list):
            logger.warning(f"{self.path} does not hold a JSON array, starting without subscribers")
            return set()

        subscribers = set()
        for entry in raw:
            try:
                subscribers.add(Subscriber.from_dict(entry))
            except ValueError as e:
                logger.warning(f"Skipping subscriber entry: {e}")
        return subscribers

    def save(self, subscribers: Iterable[Subscriber]) -> None:
        """
        Overwrite the subscriber file with the given set.

        Raises:
            PersistenceError: the file could not be written
        """
        ordered = sorted(set(subscribers), key=lambda s: s.key)
        content = json.dumps([s.to_dict() for s in ordered], indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"Could not write {self.path}: {e}")
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

    def subscribers(self) -> List[Subscriber]:
        """Snapshot of the current subscribers, in file order."""
        return sorted(self._subscribers, key=lambda s: s.key)

    def is_subscribed(self, chat_id: int, thread_id: Optional[int] = None) -> bool:
        return Subscriber(chat_id, thread_id) in self._subscribers

    def add(self, chat_id: int, thread_id: Optional[int] = None) -> bool:
        """
        Subscribe a destination.

        Returns:
            False if it was already subscribed

        Raises:
            PersistenceError: the file could not be written; the
                in-memory set is left unchanged
        """
        subscriber = Subscriber(chat_id, thread_id)
        if subscriber in self._subscribers:
            return False

        updated = self._subscribers | {subscriber}
        self.save(updated)
        self._subscribers = updated
        logger.info(f"Subscribed chat {chat_id} (thread {thread_id})")
        return True

    def remove(self, chat_id: int, thread_id: Optional[int] = None) -> bool:
        """
        Unsubscribe a destination.

        Returns:
            False if it was not subscribed

        Raises:
            PersistenceError: the file could not be written; the
                in-memory set is left unchanged
        """
        subscriber = Subscriber(chat_id, thread_id)
        if subscriber not in self._subscribers:
            return False

        updated = self._subscribers - {subscriber}
        self.save(updated)
        self._subscribers = updated
        logger.info(f"Unsubscribed chat {chat_id} (thread {thread_id})")
        return True

    def __len__(self) -> int:
        return len(self._subscribers)
