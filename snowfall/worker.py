"""
Message protocol and handle for the snowfall rendering worker.

The worker is an external collaborator: it owns the transferred surface
and animates it. The page talks to it only through fire-and-forget
messages; no replies are defined.

Messages:
- {"type": "canvas", "canvas": <surface>}  (exactly once, first)
- {"type": "start"}
- {"type": "stop"}
- {"type": "resize", "window": {"innerWidth": w, "innerHeight": h}}
"""

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence, Union

from snowfall.page import OffscreenSurface, RenderSurface, Viewport
from snowfall.logger import logger


@dataclass(frozen=True)
class CanvasMessage:
    canvas: OffscreenSurface
    type: str = "canvas"

    def to_payload(self) -> dict:
        return {"type": self.type, "canvas": self.canvas.describe()}


@dataclass(frozen=True)
class StartMessage:
    type: str = "start"

    def to_payload(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class StopMessage:
    type: str = "stop"

    def to_payload(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class ResizeMessage:
    inner_width: int
    inner_height: int
    type: str = "resize"

    def to_payload(self) -> dict:
        return {
            "type": self.type,
            "window": {"innerWidth": self.inner_width, "innerHeight": self.inner_height},
        }


WorkerMessage = Union[CanvasMessage, StartMessage, StopMessage, ResizeMessage]


class WorkerPort(Protocol):
    """One-directional channel to the rendering worker."""

    def post_message(self, message: WorkerMessage, transfer: Sequence[OffscreenSurface] = ()) -> None:
        ...


class MockWorkerPort:
    """
    Worker port that only logs and records messages.

    Used when MOCK_MODE=true or MQTT is disabled, and in tests.
    """

    def __init__(self):
        self.messages: list[WorkerMessage] = []
        self.transferred: list[OffscreenSurface] = []

    def post_message(self, message: WorkerMessage, transfer: Sequence[OffscreenSurface] = ()) -> None:
        self.messages.append(message)
        self.transferred.extend(transfer)
        logger.debug(f"[MOCK] Worker message: {message.to_payload()}")

    @property
    def payloads(self) -> list[dict]:
        return [message.to_payload() for message in self.messages]

    def types(self) -> list[str]:
        return [message.type for message in self.messages]


class SnowfallWorker:
    """
    Live connection to the rendering worker.

    Construction hands the canvas off to the worker (one-time, irrevocable)
    and immediately sends the current viewport size.
    """

    def __init__(self, canvas: RenderSurface, port: WorkerPort, viewport: Callable[[], Viewport]):
        self.port = port
        self._viewport = viewport

        offscreen = canvas.transfer_control_to_offscreen()
        self.port.post_message(CanvasMessage(offscreen), transfer=[offscreen])
        logger.info(f"Canvas {offscreen.surface_id} handed off to snowfall worker")

        self.resize()

    def start(self) -> None:
        self.port.post_message(StartMessage())

    def stop(self) -> None:
        self.port.post_message(StopMessage())

    def resize(self) -> None:
        viewport = self._viewport()
        self.port.post_message(ResizeMessage(viewport.inner_width, viewport.inner_height))
