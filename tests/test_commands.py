"""Tests for the Telegram command handlers."""

import asyncio

import pytest

from conftest import make_context, make_update
from weatherbot.config import Config
from weatherbot.errors import PersistenceError, TransportError
from weatherbot.handlers import CommandHandlers
from weatherbot.notifications import MessageTemplates, PipelineResult
from weatherbot.storage import Subscriber, SubscriptionStore

OWNER = 4242


@pytest.fixture(autouse=True)
def owner(monkeypatch):
    monkeypatch.setattr(Config, "OWNER_ID", OWNER)
    monkeypatch.setattr(Config, "DELIVERY_TIME", "13:12")


@pytest.fixture
def store(tmp_path) -> SubscriptionStore:
    return SubscriptionStore(str(tmp_path / "subscriptions.json"))


@pytest.fixture
def handlers(store, mock_notifier) -> CommandHandlers:
    return CommandHandlers(store, mock_notifier)


def _replies(context):
    return [
        (c.kwargs["chat_id"], c.kwargs["message_thread_id"], c.kwargs["text"])
        for c in context.bot.send_message.await_args_list
    ]


class TestStart:
    def test_start_sends_help(self, handlers):
        context = make_context()

        asyncio.run(handlers.start_command(make_update(chat_id=5, thread_id=8), context))

        [(chat_id, thread_id, text)] = _replies(context)
        assert (chat_id, thread_id) == (5, 8)
        assert "/subscribe" in text and "/unsubscribe" in text and "/get_weather" in text
        assert "13:12 Uhr" in text


class TestSubscribe:
    def test_subscribe_then_again(self, handlers, store):
        context = make_context()
        update = make_update(chat_id=5, thread_id=8)

        asyncio.run(handlers.subscribe_command(update, context))
        asyncio.run(handlers.subscribe_command(update, context))

        assert store.subscribers() == [Subscriber(5, 8)]
        assert [r[2] for r in _replies(context)] == [
            MessageTemplates.SUBSCRIBED,
            MessageTemplates.ALREADY_SUBSCRIBED,
        ]
        assert all(r[:2] == (5, 8) for r in _replies(context))

    def test_reply_thread_is_ignored_outside_topics(self, handlers, store):
        update = make_update(chat_id=5)
        update.effective_message.message_thread_id = 77

        asyncio.run(handlers.subscribe_command(update, make_context()))

        assert store.subscribers() == [Subscriber(5, None)]

    def test_unsubscribe(self, handlers, store):
        store.add(5)
        context = make_context()

        asyncio.run(handlers.unsubscribe_command(make_update(chat_id=5), context))
        asyncio.run(handlers.unsubscribe_command(make_update(chat_id=5), context))

        assert len(store) == 0
        assert [r[2] for r in _replies(context)] == [
            MessageTemplates.UNSUBSCRIBED,
            MessageTemplates.NOT_SUBSCRIBED,
        ]

    def test_save_failure_is_reported(self, handlers, store, monkeypatch):
        def fail(*args, **kwargs):
            raise PersistenceError("read-only file system")

        monkeypatch.setattr(store, "save", fail)
        context = make_context()

        asyncio.run(handlers.subscribe_command(make_update(chat_id=5), context))

        assert _replies(context) == [(5, None, MessageTemplates.SAVE_FAILED)]
        assert len(store) == 0


class TestGetWeather:
    def test_non_owner_is_ignored(self, handlers, mock_notifier):
        context = make_context()

        asyncio.run(handlers.get_weather_command(make_update(user_id=1), context))

        mock_notifier.run_pipeline.assert_not_awaited()
        mock_notifier.send_result.assert_not_awaited()
        context.bot.send_message.assert_not_awaited()
        context.bot.send_media_group.assert_not_awaited()

    def test_owner_gets_forecast_in_own_chat(self, handlers, mock_notifier):
        result = PipelineResult(images=[], summary="Sonnig.")
        mock_notifier.run_pipeline.return_value = result
        context = make_context()

        asyncio.run(handlers.get_weather_command(make_update(chat_id=9, user_id=OWNER, thread_id=3), context))

        mock_notifier.send_result.assert_awaited_once_with(9, 3, result)
        context.bot.send_message.assert_not_awaited()

    def test_pipeline_failure_replies_to_requester_only(self, handlers, mock_notifier, store):
        store.add(1)
        store.add(2)
        mock_notifier.run_pipeline.side_effect = TransportError("HTTP 500", status=500)
        context = make_context()

        asyncio.run(handlers.get_weather_command(make_update(chat_id=9, user_id=OWNER), context))

        assert _replies(context) == [(9, None, MessageTemplates.FETCH_FAILED)]
        mock_notifier.send_result.assert_not_awaited()
