"""
Page surface seen by the display orchestrator.

Models only what the orchestrator touches: the document title, the
viewport, one rendering canvas and the snow toggle (a group of mutually
exclusive controls named "snow" inside a container with a hidden flag).
"""

import itertools
from dataclasses import dataclass
from typing import Callable, Optional

from snowfall.errors import MissingControlError, SurfaceTransferredError
from snowfall.logger import logger

_surface_ids = itertools.count(1)


@dataclass
class Viewport:
    inner_width: int
    inner_height: int


@dataclass(frozen=True)
class OffscreenSurface:
    """Handle to a surface whose control now belongs to the worker."""

    surface_id: int
    width: int
    height: int

    def describe(self) -> dict:
        return {"id": self.surface_id, "width": self.width, "height": self.height}


class RenderSurface:
    """
    Canvas element. Control can be handed off exactly once.

    After transfer the page side loses access: any further transfer
    raises SurfaceTransferredError.
    """

    def __init__(self, width: int = 300, height: int = 150):
        self.surface_id = next(_surface_ids)
        self.width = width
        self.height = height
        self.transferred = False

    def transfer_control_to_offscreen(self) -> OffscreenSurface:
        if self.transferred:
            raise SurfaceTransferredError(f"Surface {self.surface_id} was already transferred")
        self.transferred = True
        logger.debug(f"Surface {self.surface_id} transferred offscreen")
        return OffscreenSurface(self.surface_id, self.width, self.height)


@dataclass
class ToggleControl:
    value: str
    checked: bool = False


class SnowToggle:
    """Radio-style control group plus the container's hidden flag."""

    name = "snow"

    def __init__(self, values: tuple[str, ...] = ("snowfall", "none"), hidden: bool = True):
        self.controls = {value: ToggleControl(value) for value in values}
        self.hidden = hidden
        self._listeners: list[Callable[[str], None]] = []

    def control(self, value: str) -> ToggleControl:
        """
        Get the control for a preference value.

        Raises:
            MissingControlError: If the markup offers no control for value
        """
        try:
            return self.controls[value]
        except KeyError:
            raise MissingControlError(f"No '{self.name}' control with value {value!r}") from None

    def check(self, value: str) -> None:
        """Check one control and uncheck the rest (no change event)."""
        target = self.control(value)
        for control in self.controls.values():
            control.checked = control is target

    @property
    def checked_value(self) -> Optional[str]:
        for control in self.controls.values():
            if control.checked:
                return control.value
        return None

    def on_change(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def choose(self, value: str) -> None:
        """User interaction: check a control and fire change listeners."""
        self.check(value)
        for listener in list(self._listeners):
            listener(value)


class Page:
    """Document with title, viewport, canvas and toggle."""

    def __init__(
        self,
        title: str,
        viewport: Viewport,
        canvas: Optional[RenderSurface] = None,
        toggle: Optional[SnowToggle] = None,
    ):
        self.title = title
        self.viewport = viewport
        self.canvas = canvas or RenderSurface()
        self.toggle = toggle or SnowToggle()
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def add_event_listener(self, event_type: str, listener: Callable[[], None]) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def dispatch_event(self, event_type: str) -> None:
        for listener in list(self._listeners.get(event_type, [])):
            listener()

    def resize(self, width: int, height: int) -> None:
        """Change the viewport and fire "resize"."""
        self.viewport = Viewport(width, height)
        self.dispatch_event("resize")
