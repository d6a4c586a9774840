from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class PointerEnter:
    node_id: str


@dataclass(frozen=True)
class PointerLeave:
    node_id: str


@dataclass(frozen=True)
class DragStart:
    node_id: str


@dataclass(frozen=True)
class DragMove:
    node_id: str
    # simulation coordinates
    x: float
    y: float


@dataclass(frozen=True)
class DragEnd:
    node_id: str


@dataclass(frozen=True)
class Resize:
    window_width: float
    window_height: float


@dataclass(frozen=True)
class Zoom:
    factor: float
    # screen anchor; the surface center when omitted
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass(frozen=True)
class Pan:
    dx: float
    dy: float


PointerEvent = Union[PointerEnter, PointerLeave, DragStart, DragMove, DragEnd]
ViewportEvent = Union[Resize, Zoom, Pan]
Event = Union[PointerEvent, ViewportEvent]


_TYPE_MAP = {
    "PointerEnter": PointerEnter,
    "PointerLeave": PointerLeave,
    "DragStart": DragStart,
    "DragMove": DragMove,
    "DragEnd": DragEnd,
    "Resize": Resize,
    "Zoom": Zoom,
    "Pan": Pan,
}


def event_from_dict(payload: Dict[str, Any]) -> Event:
    """
    Build an event from its JSON form, e.g. {"type": "DragMove", "node_id": "q1", "x": 3, "y": 4}.

    Raises:
        ValueError: On an unknown or missing type
    """
    data = dict(payload)
    typ = data.pop("type", None)
    cls = _TYPE_MAP.get(typ)
    if cls is None:
        raise ValueError(f"unknown event type: {typ!r}")
    return cls(**data)


def event_type(event: Event) -> str:
    return type(event).__name__
