"""Tests for the worker message protocol and handle."""

import pytest

from snowfall.errors import SurfaceTransferredError
from snowfall.page import OffscreenSurface, RenderSurface, Viewport
from snowfall.worker import (
    CanvasMessage,
    MockWorkerPort,
    ResizeMessage,
    SnowfallWorker,
    StartMessage,
    StopMessage,
)


class TestMessages:

    def test_canvas_payload(self):
        surface = OffscreenSurface(7, 300, 150)
        assert CanvasMessage(surface).to_payload() == {
            "type": "canvas",
            "canvas": {"id": 7, "width": 300, "height": 150},
        }

    def test_start_stop_payloads(self):
        assert StartMessage().to_payload() == {"type": "start"}
        assert StopMessage().to_payload() == {"type": "stop"}

    def test_resize_payload(self):
        assert ResizeMessage(1920, 1080).to_payload() == {
            "type": "resize",
            "window": {"innerWidth": 1920, "innerHeight": 1080},
        }


class TestSnowfallWorker:

    def test_construction_transfers_canvas_then_resizes(self):
        port = MockWorkerPort()
        canvas = RenderSurface()
        SnowfallWorker(canvas, port, lambda: Viewport(1024, 768))

        assert port.types() == ["canvas", "resize"]
        assert port.messages[0].canvas.surface_id == canvas.surface_id
        assert port.transferred == [port.messages[0].canvas]
        assert port.payloads[1] == {"type": "resize", "window": {"innerWidth": 1024, "innerHeight": 768}}
        assert canvas.transferred is True

    def test_canvas_cannot_be_shared(self):
        canvas = RenderSurface()
        SnowfallWorker(canvas, MockWorkerPort(), lambda: Viewport(1, 1))
        with pytest.raises(SurfaceTransferredError):
            SnowfallWorker(canvas, MockWorkerPort(), lambda: Viewport(1, 1))

    def test_commands(self):
        port = MockWorkerPort()
        viewport = Viewport(10, 20)
        worker = SnowfallWorker(RenderSurface(), port, lambda: viewport)

        worker.start()
        worker.stop()
        viewport = Viewport(30, 40)
        worker.resize()

        assert port.types() == ["canvas", "resize", "start", "stop", "resize"]
        assert port.messages[-1] == ResizeMessage(30, 40)
