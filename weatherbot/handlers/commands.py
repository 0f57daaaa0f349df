"""
Telegram bot command handlers.
Handles /start, /subscribe, /unsubscribe and /get_weather.
"""

import logging
from typing import Optional, Tuple

from telegram import Update
from telegram.ext import ContextTypes

from ..config import Config
from ..errors import PersistenceError
from ..notifications import Notifier, MessageTemplates
from ..storage import SubscriptionStore

logger = logging.getLogger(__name__)


def _destination(update: Update) -> Tuple[int, Optional[int]]:
    """Chat id and forum topic id of the message that triggered a command."""
    message = update.effective_message
    thread_id = message.message_thread_id if message.is_topic_message else None
    return update.effective_chat.id, thread_id


class CommandHandlers:
    """
    Handles all Telegram bot commands.

    /get_weather is only answered for the configured owner; everybody
    else is ignored without a reply.
    """

    def __init__(self, store: SubscriptionStore, notifier: Notifier):
        """
        Initialize command handlers.

        Args:
            store: Subscriber store
            notifier: Notifier instance
        """
        self.store = store
        self.notifier = notifier

    def _is_owner(self, update: Update) -> bool:
        user = update.effective_user
        return user is not None and Config.OWNER_ID is not None and user.id == Config.OWNER_ID

    async def _reply(
        self,
        context: ContextTypes.DEFAULT_TYPE,
        chat_id: int,
        thread_id: Optional[int],
        text: str
    ) -> None:
        await context.bot.send_message(
            chat_id=chat_id,
            text=text,
            message_thread_id=thread_id
        )

    async def start_command(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """
        Handle /start command.
        Sends the help message with the command list.
        """
        chat_id, thread_id = _destination(update)
        message = MessageTemplates.format_help_message(Config.delivery_time())
        await self._reply(context, chat_id, thread_id, message)

    async def subscribe_command(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """
        Handle /subscribe command.
        Adds this chat (and topic) to the daily delivery.
        """
        chat_id, thread_id = _destination(update)
        try:
            added = self.store.add(chat_id, thread_id)
        except PersistenceError as e:
            logger.error(f"Subscribe for chat {chat_id} not saved: {e}")
            await self._reply(context, chat_id, thread_id, MessageTemplates.SAVE_FAILED)
            return

        text = MessageTemplates.SUBSCRIBED if added else MessageTemplates.ALREADY_SUBSCRIBED
        await self._reply(context, chat_id, thread_id, text)

    async def unsubscribe_command(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """
        Handle /unsubscribe command.
        Removes this chat (and topic) from the daily delivery.
        """
        chat_id, thread_id = _destination(update)
        try:
            removed = self.store.remove(chat_id, thread_id)
        except PersistenceError as e:
            logger.error(f"Unsubscribe for chat {chat_id} not saved: {e}")
            await self._reply(context, chat_id, thread_id, MessageTemplates.SAVE_FAILED)
            return

        text = MessageTemplates.UNSUBSCRIBED if removed else MessageTemplates.NOT_SUBSCRIBED
        await self._reply(context, chat_id, thread_id, text)

    async def get_weather_command(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """
        Handle /get_weather command.
        Runs the pipeline now and sends the result to the requesting chat only.
        """
        if not self._is_owner(update):
            user = update.effective_user
            logger.debug(f"Ignoring /get_weather from {user.id if user else 'unknown'}")
            return

        chat_id, thread_id = _destination(update)
        try:
            result = await self.notifier.run_pipeline()
            await self.notifier.send_result(chat_id, thread_id, result)
        except Exception as e:
            logger.error(f"On-demand forecast for chat {chat_id} failed: {e}")
            await self._reply(context, chat_id, thread_id, MessageTemplates.FETCH_FAILED)
