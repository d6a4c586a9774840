from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from archgraph_core import __version__
from archgraph_core.config import ViewConfig, load_config
from archgraph_core.events import event_from_dict
from archgraph_core.view import GraphView

from .engine import AsyncGraphSession

DEFAULT_DATA = Path(__file__).resolve().parents[2] / "data" / "arkitekter_byggnader.json"

logging.basicConfig(
    level=os.environ.get("ARCHGRAPH_LOG_LEVEL", "WARNING").upper(),
    format="[%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_session() -> AsyncGraphSession:
    config_path = os.environ.get("ARCHGRAPH_CONFIG")
    config = load_config(config_path) if config_path else ViewConfig()
    data_path = os.environ.get("ARCHGRAPH_DATA", str(DEFAULT_DATA))
    logger.info("Loading relation data from %s", data_path)
    return AsyncGraphSession(GraphView.from_file(data_path, config))


session = create_session()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await session.start()
    try:
        yield
    finally:
        await session.close()


app = FastAPI(title="archgraph API", version=__version__, lifespan=lifespan)

# Allow local dev frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class EventRequest(BaseModel):
    type: Literal[
        "PointerEnter", "PointerLeave", "DragStart", "DragMove", "DragEnd", "Resize", "Zoom", "Pan"
    ]
    node_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    window_width: Optional[float] = None
    window_height: Optional[float] = None
    factor: Optional[float] = None
    dx: Optional[float] = None
    dy: Optional[float] = None
    # DragMove coordinates are screen coordinates unless this is false
    screen: bool = True


class ControlRequest(BaseModel):
    cmd: Literal["start", "stop", "reheat", "frame"]


@app.get("/graph")
async def get_graph():
    return JSONResponse(jsonable_encoder(session.graph()))


@app.get("/state")
async def get_state():
    return JSONResponse(jsonable_encoder(session.state()))


@app.post("/events")
async def post_event(body: EventRequest):
    payload = body.model_dump(exclude_none=True)
    screen = payload.pop("screen")
    if body.type == "DragMove" and screen and body.x is not None and body.y is not None:
        payload["x"], payload["y"] = session.view.viewport.to_simulation(body.x, body.y)
    try:
        event = event_from_dict(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    result = await session.handle(event)
    return {"ok": True, "interaction": result.name if result is not None else None}


@app.post("/control")
async def post_control(body: ControlRequest):
    if body.cmd == "start":
        await session.start()
        return {"ok": True}
    if body.cmd == "stop":
        await session.stop()
        return {"ok": True}
    if body.cmd == "reheat":
        await session.reheat()
        return {"ok": True}
    if body.cmd == "frame":
        ticked = await session.frame()
        return {"ok": True, "ticked": ticked}
    return {"ok": False}


@app.websocket("/stream")
async def ws_stream(ws: WebSocket):
    await ws.accept()

    # Send initial graph
    await ws.send_json({
        "type": "init",
        "graph": jsonable_encoder(session.graph()),
    })

    q = session.subscribe()
    try:
        # Immediately push current state to client
        await ws.send_json({"type": "state", "state": jsonable_encoder(session.state())})
        while True:
            st = await q.get()
            await ws.send_json({"type": "state", "state": jsonable_encoder(st)})
    except WebSocketDisconnect:
        pass
    finally:
        session.unsubscribe(q)


@app.get("/")
async def root():
    return {"service": "archgraph", "status": "ok", "failed": session.view.is_failed}
