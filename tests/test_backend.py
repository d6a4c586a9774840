"""
Tests for the asyncio session host and the FastAPI backend.

Session tests run their own event loop through `asyncio.run`. HTTP tests use
Starlette's TestClient without entering its context, so the lifespan frame
loop is not started and frames are advanced explicitly via /control. Stream
tests enter the client so the lifespan and the WebSocket share one loop.
"""

import asyncio
import os

import pytest

from archgraph_core.events import DragEnd, DragMove, DragStart, PointerEnter, Resize
from archgraph_core.view import GraphView

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SAMPLE = os.path.join(ROOT, 'data', 'arkitekter_byggnader.json')
ASPLUND = 'https://example.org/a/asplund'


def new_session(path=SAMPLE):
    from app.backend.engine import AsyncGraphSession

    return AsyncGraphSession(GraphView.from_file(path), frame_interval=0.0)


async def wait_until(predicate, timeout=10.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        assert loop.time() < deadline, 'condition not reached in time'
        await asyncio.sleep(0)


class TestAsyncGraphSession:
    def test_frame_broadcasts_state(self):
        async def scenario():
            session = new_session()
            q = session.subscribe()
            assert await session.frame() is True
            state = q.get_nowait()
            assert state['tick'] == 1
            session.unsubscribe(q)
            await session.frame()
            assert q.empty()

        asyncio.run(scenario())

    def test_loop_settles_parks_and_resumes(self):
        async def scenario():
            session = new_session()
            await session.start()
            await wait_until(lambda: not session.view.running)
            settled_ticks = session.view.engine.tick_count
            assert 295 <= settled_ticks <= 305
            assert session.is_running  # parked, not finished

            await session.handle(Resize(1480, 800))
            await wait_until(lambda: session.view.engine.tick_count > settled_ticks)
            await wait_until(lambda: not session.view.running)
            await session.close()
            assert not session.is_running

        asyncio.run(scenario())

    def test_drag_through_session(self):
        async def scenario():
            session = new_session()
            await session.handle(DragStart(ASPLUND))
            await session.handle(DragMove(ASPLUND, 50.0, 60.0))
            await session.frame()
            glyph = session.view.renderer.nodes[ASPLUND]
            assert (glyph.x, glyph.y) == (50.0, 60.0)
            await session.handle(DragEnd(ASPLUND))
            assert session.state()['interaction'] == 'IDLE'

        asyncio.run(scenario())

    def test_slow_subscriber_does_not_block(self):
        async def scenario():
            from app.backend.engine import AsyncGraphSession

            session = AsyncGraphSession(GraphView.from_file(SAMPLE), frame_interval=0.0, queue_size=2)
            q = session.subscribe()
            for _ in range(5):
                await session.frame()
            assert q.qsize() == 2

        asyncio.run(scenario())

    def test_close_tears_down(self):
        async def scenario():
            session = new_session()
            await session.handle(DragStart(ASPLUND))
            await session.close()
            assert not session.view.running
            assert not any(n.pinned for n in session.view.engine.nodes)
            await session.start()
            assert not session.is_running

        asyncio.run(scenario())

    def test_failed_view_session(self, tmp_path):
        async def scenario():
            session = new_session(str(tmp_path / 'missing.json'))
            assert await session.frame() is False
            assert await session.handle(PointerEnter('x')) is None
            await session.reheat()
            assert session.state()['failed'] is True
            assert session.graph() == {'nodes': [], 'edges': []}

        asyncio.run(scenario())


@pytest.fixture
def client():
    pytest.importorskip('httpx')
    from fastapi.testclient import TestClient

    from app.backend.main import app

    return TestClient(app)


class TestHttpApi:
    def test_root(self, client):
        r = client.get('/')
        assert r.status_code == 200
        assert r.json() == {'service': 'archgraph', 'status': 'ok', 'failed': False}

    def test_graph(self, client):
        data = client.get('/graph').json()
        assert len(data['nodes']) == 18
        assert len(data['edges']) == 12

    def test_focus_roundtrip(self, client):
        r = client.post('/events', json={'type': 'PointerEnter', 'node_id': ASPLUND})
        assert r.json() == {'ok': True, 'interaction': 'FOCUSED'}
        panel = client.get('/state').json()['panel']
        assert panel['connections'] == '2 byggnader'

        r = client.post('/events', json={'type': 'PointerLeave', 'node_id': ASPLUND})
        assert r.json()['interaction'] == 'IDLE'
        assert client.get('/state').json()['panel'] == {'mode': 'HINT'}

    def test_drag_with_screen_coordinates(self, client):
        from app.backend.main import session

        client.post('/events', json={'type': 'DragStart', 'node_id': ASPLUND})
        client.post('/events', json={'type': 'DragMove', 'node_id': ASPLUND, 'x': 120, 'y': 80})
        expected = session.view.viewport.to_simulation(120.0, 80.0)
        p = session.view.engine.position(ASPLUND)
        assert (p.fx, p.fy) == pytest.approx(expected)
        r = client.post('/events', json={'type': 'DragEnd', 'node_id': ASPLUND})
        assert r.json()['interaction'] == 'IDLE'
        assert not p.pinned

    def test_control_frame(self, client):
        before = client.get('/state').json()['tick']
        r = client.post('/control', json={'cmd': 'reheat'})
        assert r.json() == {'ok': True}
        r = client.post('/control', json={'cmd': 'frame'})
        assert r.json() == {'ok': True, 'ticked': True}
        assert client.get('/state').json()['tick'] == before + 1

    def test_bad_event_payloads(self, client):
        assert client.post('/events', json={'type': 'Click'}).status_code == 422
        assert client.post('/events', json={'type': 'Resize', 'window_width': 800}).status_code == 422
        assert client.post('/control', json={'cmd': 'explode'}).status_code == 422


@pytest.fixture
def live_client(monkeypatch):
    """TestClient with the lifespan running against a fresh, settled session."""
    pytest.importorskip('httpx')
    from fastapi.testclient import TestClient

    import app.backend.main as backend
    from app.backend.engine import AsyncGraphSession

    view = GraphView.from_file(SAMPLE)
    view.run_until_settled()
    fresh = AsyncGraphSession(view)
    monkeypatch.setattr(backend, 'session', fresh)
    with TestClient(backend.app) as test_client:
        yield test_client, fresh


class TestStream:
    def test_stream_init_state_and_event(self, live_client):
        client, _session = live_client
        with client.websocket_connect('/stream') as ws:
            init = ws.receive_json()
            assert init['type'] == 'init'
            assert len(init['graph']['nodes']) == 18
            assert len(init['graph']['edges']) == 12

            first = ws.receive_json()
            assert first['type'] == 'state'
            assert first['state']['panel'] == {'mode': 'HINT'}

            r = client.post('/events', json={'type': 'PointerEnter', 'node_id': ASPLUND})
            assert r.json()['interaction'] == 'FOCUSED'
            msg = ws.receive_json()
            assert msg['type'] == 'state'
            assert msg['state']['panel']['connections'] == '2 byggnader'

    def test_shutdown_releases_pins(self, monkeypatch):
        pytest.importorskip('httpx')
        from fastapi.testclient import TestClient

        import app.backend.main as backend
        from app.backend.engine import AsyncGraphSession

        session = AsyncGraphSession(GraphView.from_file(SAMPLE))
        monkeypatch.setattr(backend, 'session', session)
        with TestClient(backend.app) as client:
            client.post('/events', json={'type': 'DragStart', 'node_id': ASPLUND})
            assert session.view.engine.position(ASPLUND).pinned
        assert not session.is_running
        assert not session.view.running
        assert not any(n.pinned for n in session.view.engine.nodes)
