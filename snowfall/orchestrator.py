"""
Display orchestrator: decides whether snowfall runs and keeps it in sync.

Runs once per page load, then reacts to events:
- toggle change   -> persist preference, apply it
- storage change  -> another tab changed the preference, apply it here too
- viewport resize -> forward dimensions to the worker (throttled)

All handlers are synchronous; worker commands are fire-and-forget.
"""

from datetime import datetime
from typing import Callable, Optional

from snowfall.config import RESIZE_THROTTLE_MS, STORAGE_KEY, TITLE_PREFIX
from snowfall.logger import logger
from snowfall.page import Page
from snowfall.preferences import StorageEvent, TabStorage
from snowfall.season import Season, get_season
from snowfall.state import AnimationState, DisplayState
from snowfall.throttle import Clock, Throttle
from snowfall.worker import SnowfallWorker, WorkerPort

SNOWFALL = "snowfall"
NONE = "none"
PREFERENCE_VALUES = (SNOWFALL, NONE)


class DisplayOrchestrator:
    """
    Owns the worker handle and the animation state machine (stopped/running).

    Args:
        page: Page holding title, viewport, canvas and toggle
        port: Channel to the rendering worker
        storage: This tab's view of the preference storage
        clock: Clock driving the resize throttle
        now: Current time source used for the season check
        throttle_ms: Resize throttle window
        storage_key: Key the preference is stored under
    """

    def __init__(
        self,
        page: Page,
        port: WorkerPort,
        storage: TabStorage,
        clock: Clock,
        now: Callable[[], datetime] = datetime.now,
        throttle_ms: float = RESIZE_THROTTLE_MS,
        storage_key: str = STORAGE_KEY,
    ):
        self.page = page
        self.port = port
        self.storage = storage
        self.clock = clock
        self.now = now
        self.storage_key = storage_key
        self.page_title = page.title

        self.worker: Optional[SnowfallWorker] = None
        self.is_winter = False
        self.state = DisplayState(title=page.title)
        self._throttled_resize = Throttle(self._forward_resize, throttle_ms, clock)

    # ------------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Hand the canvas to the worker, pick the initial animation, wire events.

        Raises:
            RuntimeError: If called twice
            MissingControlError: If the stored preference has no toggle control
        """
        if self.worker is not None:
            raise RuntimeError("Display orchestrator is already initialized")

        self.worker = SnowfallWorker(self.page.canvas, self.port, lambda: self.page.viewport)

        season = get_season(self.now())
        self.is_winter = season is Season.WINTER
        self.state.update(season=season.value, is_winter=self.is_winter)

        stored = self.storage.get(self.storage_key)

        if self.is_winter and stored:
            logger.debug(f"Restoring snow animation from storage: {stored}")
            self.page.toggle.check(stored)
            self.change_animation(stored)
        elif self.is_winter:
            logger.debug("It's winter, enabling snowfall by default")
            self.page.toggle.check(SNOWFALL)
            self.change_animation(SNOWFALL)
        else:
            logger.debug(f"No snow animation enabled by default. Season is {season.value}")

        self.page.toggle.hidden = not self.is_winter
        self.state.update(toggle_hidden=self.page.toggle.hidden)

        self.storage.subscribe(self.on_storage_change)
        self.page.toggle.on_change(self.on_toggle_change)
        self.page.add_event_listener("resize", self.on_resize)

        logger.info(
            f"Display initialized: season={season.value}, "
            f"animation={self.state.animation.value}, toggle_hidden={self.page.toggle.hidden}"
        )

    # ------------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------------

    def change_animation(self, animation_name: Optional[str]) -> None:
        """
        Apply a preference value.

        "none" stops the worker and restores the plain title, "snowfall"
        starts it and prefixes the title. Anything else is ignored.
        """
        if animation_name == NONE:
            self.worker.stop()
            self.page.title = self.page_title
            self.state.update(animation=AnimationState.STOPPED, preference=NONE, title=self.page.title)
        elif animation_name == SNOWFALL:
            self.worker.start()
            self.page.title = TITLE_PREFIX + self.page_title
            self.state.update(animation=AnimationState.RUNNING, preference=SNOWFALL, title=self.page.title)
        else:
            logger.warning(f"Ignoring unknown snow animation: {animation_name!r}")

    # ------------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------------

    def on_toggle_change(self, value: str) -> None:
        logger.debug(f"Snow toggle changed: {value}")
        try:
            self.storage.set(self.storage_key, value)
        except OSError:
            logger.error(f"Snow preference not saved, keeping {self.state.preference}")
            if self.state.preference in PREFERENCE_VALUES:
                self.page.toggle.check(self.state.preference)
            raise
        self.change_animation(value)

    def on_storage_change(self, event: StorageEvent) -> None:
        if event.key != self.storage_key:
            return

        value = self.storage.get(self.storage_key)
        logger.debug(f"Snow preference changed in another tab: {value}")
        if value in PREFERENCE_VALUES:
            self.page.toggle.check(value)
        self.change_animation(value)

    def on_resize(self) -> bool:
        """
        Returns:
            True if the new size was forwarded, False if throttled
        """
        return self._throttled_resize()

    def _forward_resize(self) -> None:
        self.worker.resize()

    # ------------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------------

    @property
    def animation(self) -> AnimationState:
        return self.state.animation

    def get_snapshot(self) -> dict:
        snapshot = self.state.get_snapshot()
        snapshot["viewport"] = {
            "width": self.page.viewport.inner_width,
            "height": self.page.viewport.inner_height,
        }
        snapshot["checked"] = self.page.toggle.checked_value
        return snapshot
