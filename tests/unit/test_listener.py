"""Unit tests for relay message handling on the consumer side"""
import asyncio
from unittest.mock import patch

import pytest

from dashboard import listener
from dashboard.listener import UPDATE_TOKEN, handle_message, listen_for_updates


class CountingController:
    def __init__(self):
        self.refreshes = 0

    async def refresh(self):
        self.refreshes += 1
        return True


class StopListening(Exception):
    """Raised by the fake connect once its scripted connections run out."""


class FakeConnection:
    """Async context manager yielding scripted messages, or failing on enter."""

    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self

    async def __aexit__(self, *exc_info):
        return False

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        for message in self.outcome:
            yield message


def scripted_connect(*outcomes):
    remaining = list(outcomes)

    def connect(url):
        if not remaining:
            raise StopListening()
        return FakeConnection(remaining.pop(0))

    return connect


async def drain_refreshes():
    pending = list(listener._refresh_tasks)
    if pending:
        await asyncio.gather(*pending)


def run_and_drain(message, controller):
    async def scenario():
        handled = await handle_message(message, controller)
        await drain_refreshes()
        return handled

    return asyncio.run(scenario())


def run_listener(controller, *outcomes):
    """Run the reconnect loop over scripted connections; returns the connect mock."""
    async def scenario():
        with pytest.raises(StopListening):
            await listen_for_updates("ws://relay/ws", controller, reconnect_delay=0)
        await drain_refreshes()

    with patch.object(listener.websockets, "connect", side_effect=scripted_connect(*outcomes)) as connect:
        asyncio.run(scenario())
    return connect


class TestHandleMessage:

    def test_token_schedules_refresh(self):
        controller = CountingController()

        assert run_and_drain(UPDATE_TOKEN, controller) is True
        assert controller.refreshes == 1

    def test_other_messages_ignored(self):
        controller = CountingController()

        assert run_and_drain("hello", controller) is False
        assert run_and_drain(b"csv_updated", controller) is False
        assert controller.refreshes == 0

    def test_token_value(self):
        assert UPDATE_TOKEN == "csv_updated"


class TestListenForUpdates:

    def test_tokens_from_relay_trigger_refreshes(self):
        controller = CountingController()

        connect = run_listener(controller, [UPDATE_TOKEN, "hello", UPDATE_TOKEN])

        assert controller.refreshes == 2
        connect.assert_any_call("ws://relay/ws")

    def test_first_connection_does_not_refresh_by_itself(self):
        controller = CountingController()

        run_listener(controller, [])

        assert controller.refreshes == 0

    def test_reconnect_after_close_refreshes_once(self):
        controller = CountingController()

        connect = run_listener(controller, [], [])

        assert connect.call_count == 3
        assert controller.refreshes == 1

    def test_failed_connect_is_retried(self):
        controller = CountingController()

        connect = run_listener(controller, OSError("connection refused"), [UPDATE_TOKEN])

        # The first successful connection is not a reconnect
        assert connect.call_count == 3
        assert controller.refreshes == 1

    def test_reconnect_after_failure_refreshes_before_new_tokens(self):
        controller = CountingController()

        run_listener(controller, [UPDATE_TOKEN], asyncio.TimeoutError(), [UPDATE_TOKEN])

        # One token, one catch-up refresh on reconnect, one more token
        assert controller.refreshes == 3
