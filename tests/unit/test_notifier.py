"""Unit tests for the Broadcaster fan-out

Uses in-memory WebSocket stand-ins; the FastAPI routes are covered in
test_relay_routes.py.
"""
import asyncio

from starlette.websockets import WebSocketState

from relay.notifier import UPDATE_TOKEN, Broadcaster


class FakeWebSocket:
    def __init__(self, fail_on_send: bool = False):
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.fail_on_send = fail_on_send
        self.received = []

    async def accept(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, message):
        if self.fail_on_send:
            raise RuntimeError("connection reset")
        self.received.append(message)


class GatedAcceptWebSocket(FakeWebSocket):
    """Handshake stays open until the test sets gate."""
    gate = None

    async def accept(self):
        await self.gate.wait()
        await super().accept()


async def connect_all(broadcaster, sockets):
    for ws in sockets:
        await broadcaster.connect(ws)


class TestBroadcast:

    def test_each_connected_consumer_gets_exactly_one_token(self):
        broadcaster = Broadcaster()
        sockets = [FakeWebSocket() for _ in range(3)]

        async def scenario():
            await connect_all(broadcaster, sockets)
            return await broadcaster.broadcast()

        delivered = asyncio.run(scenario())

        assert delivered == 3
        assert all(ws.received == [UPDATE_TOKEN] for ws in sockets)

    def test_disconnected_consumer_receives_nothing(self):
        broadcaster = Broadcaster()
        staying = [FakeWebSocket() for _ in range(3)]
        leaving = FakeWebSocket()

        async def scenario():
            await connect_all(broadcaster, staying + [leaving])
            broadcaster.disconnect(leaving)
            return await broadcaster.broadcast()

        delivered = asyncio.run(scenario())

        assert delivered == 3
        assert leaving.received == []
        assert broadcaster.connection_count == 3

    def test_failed_send_does_not_stop_the_broadcast(self):
        broadcaster = Broadcaster()
        healthy = [FakeWebSocket(), FakeWebSocket()]
        broken = FakeWebSocket(fail_on_send=True)

        async def scenario():
            await connect_all(broadcaster, [healthy[0], broken, healthy[1]])
            return await broadcaster.broadcast()

        delivered = asyncio.run(scenario())

        assert delivered == 2
        assert all(ws.received == [UPDATE_TOKEN] for ws in healthy)
        assert broadcaster.connection_count == 2

    def test_closed_socket_is_skipped_and_dropped(self):
        broadcaster = Broadcaster()
        open_ws, closed_ws = FakeWebSocket(), FakeWebSocket()

        async def scenario():
            await connect_all(broadcaster, [open_ws, closed_ws])
            closed_ws.client_state = WebSocketState.DISCONNECTED
            return await broadcaster.broadcast()

        assert asyncio.run(scenario()) == 1
        assert closed_ws.received == []
        assert broadcaster.connection_count == 1

    def test_broadcast_with_no_consumers(self):
        broadcaster = Broadcaster()

        assert asyncio.run(broadcaster.broadcast()) == 0
        assert broadcaster.broadcast_count == 1

    def test_counters(self):
        broadcaster = Broadcaster()

        async def scenario():
            await connect_all(broadcaster, [FakeWebSocket(), FakeWebSocket()])
            await broadcaster.broadcast()
            await broadcaster.broadcast()

        asyncio.run(scenario())

        assert broadcaster.broadcast_count == 2
        assert broadcaster.delivered_count == 4

    def test_disconnect_unknown_socket_is_noop(self):
        broadcaster = Broadcaster()

        broadcaster.disconnect(FakeWebSocket())

        assert broadcaster.connection_count == 0

    def test_consumer_in_handshake_survives_broadcast(self):
        broadcaster = Broadcaster()
        ws = GatedAcceptWebSocket()

        async def scenario():
            ws.gate = asyncio.Event()
            connecting = asyncio.create_task(broadcaster.connect(ws))
            await asyncio.sleep(0)
            during = await broadcaster.broadcast()
            ws.gate.set()
            await connecting
            after = await broadcaster.broadcast()
            return during, after

        during, after = asyncio.run(scenario())

        assert during == 0
        assert after == 1
        assert ws.received == [UPDATE_TOKEN]
        assert broadcaster.connection_count == 1
