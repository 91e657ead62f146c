"""Play/pause state machine that advances the selected day."""

import enum
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class PlaybackState(enum.Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class AnimationDriver:
    """
    Two states, PAUSED (initial) and PLAYING.

    The caller owns the timer: while `is_playing` it calls `tick()` once per
    period with the current and last day index. `tick()` returns the next
    index, or None once playback has run past the last day, at which point
    the driver has already switched itself back to PAUSED.
    """

    def __init__(self):
        self.state = PlaybackState.PAUSED

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def play(self) -> bool:
        if self.is_playing:
            return False
        self.state = PlaybackState.PLAYING
        logger.debug("Playback started")
        return True

    def pause(self) -> bool:
        if not self.is_playing:
            return False
        self.state = PlaybackState.PAUSED
        logger.debug("Playback paused")
        return True

    def toggle(self) -> PlaybackState:
        if self.is_playing:
            self.pause()
        else:
            self.play()
        return self.state

    def tick(self, current_index: int, last_index: int) -> Optional[int]:
        if not self.is_playing:
            return None
        nxt = current_index + 1
        if nxt > last_index:
            self.state = PlaybackState.PAUSED
            logger.debug(f"Playback reached last day ({last_index}), stopping")
            return None
        return nxt

    @property
    def button_label(self) -> str:
        return "⏸ Pause" if self.is_playing else "▶ Play"
