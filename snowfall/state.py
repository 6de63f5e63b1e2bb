"""
Display state tracking for the snowfall orchestrator.

Holds what the orchestrator last decided so it can be reported over the
HTTP API and inspected in tests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
import threading


class AnimationState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class DisplayState:
    """
    Snapshot-able orchestrator state.

    Thread-safe via internal lock. All updates should use the update() method.
    """

    animation: AnimationState = AnimationState.STOPPED

    # Last preference applied ("snowfall" | "none"), None until one is applied
    preference: Optional[str] = None

    # Season observed at initialization
    season: Optional[str] = None
    is_winter: bool = False

    toggle_hidden: bool = True
    title: str = ""

    last_updated: datetime = field(default_factory=datetime.now)

    _lock: threading.Lock = field(default_factory=threading.Lock)

    def update(self, **kwargs) -> None:
        """
        Thread-safe state update.

        Example:
            display_state.update(animation=AnimationState.RUNNING, preference="snowfall")
        """
        with self._lock:
            for key, value in kwargs.items():
                if hasattr(self, key) and not key.startswith('_'):
                    setattr(self, key, value)
            self.last_updated = datetime.now()

    def get_snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "animation": self.animation.value,
                "preference": self.preference,
                "season": self.season,
                "is_winter": self.is_winter,
                "toggle_hidden": self.toggle_hidden,
                "title": self.title,
                "last_updated": self.last_updated.isoformat(),
            }
