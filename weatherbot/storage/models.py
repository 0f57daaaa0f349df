"""
Storage models for the forecast bot.
These dataclasses represent the structure of data stored in the subscriber file.
"""

from dataclasses import dataclass
from typing import Optional, Any, Tuple


@dataclass(frozen=True)
class Subscriber:
    """
    A delivery destination for the daily forecast.

    Attributes:
        chat_id: Telegram chat/channel ID
            Example: -1001234567890
        thread_id: Forum topic (message thread) inside the chat, if any
            Example: 42
            None means the chat's main conversation
    """
    chat_id: int
    thread_id: Optional[int] = None

    @property
    def key(self) -> Tuple[int, int]:
        """Sort key; the main conversation sorts before any topic."""
        return (self.chat_id, -1 if self.thread_id is None else self.thread_id)

    def to_dict(self) -> dict:
        """Convert to the on-disk representation."""
        return {
            "chatId": self.chat_id,
            "messageThreadId": self.thread_id,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Subscriber":
        """
        Create from the on-disk representation.

        A bare integer is accepted as a chat without thread.

        Raises:
            ValueError: data is neither an integer nor a valid mapping
        """
        if isinstance(data, bool):
            raise ValueError(f"Invalid subscriber entry: {data!r}")
        if isinstance(data, int):
            return cls(chat_id=data)
        if not isinstance(data, dict) or not isinstance(data.get("chatId"), int):
            raise ValueError(f"Invalid subscriber entry: {data!r}")
        thread_id = data.get("messageThreadId")
        if thread_id is not None and not isinstance(thread_id, int):
            raise ValueError(f"Invalid messageThreadId: {thread_id!r}")
        return cls(chat_id=data["chatId"], thread_id=thread_id)
