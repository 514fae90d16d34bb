"""Progressive frame counters.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class FrameCounters:
    """Two monotonic per-frame counters.

    Attributes
    ----------
    frames_rendered : int
        Total frames rendered. Never reset; seeds per-frame randomness.
    frames_accumulated : int
        Frames blended into the running average since the last reset.
    """

    def __init__(self) -> None:
        self.frames_rendered = 0
        self.frames_accumulated = 0

    def tick(self) -> None:
        self.frames_rendered += 1
        self.frames_accumulated += 1

    def reset_accumulation(self) -> None:
        """Restart the running average; ``frames_rendered`` is untouched."""
        logger.debug(
            "Accumulation reset after %d frames (frame %d)",
            self.frames_accumulated,
            self.frames_rendered,
        )
        self.frames_accumulated = 0

    def __repr__(self) -> str:
        return (
            f"FrameCounters(frames_rendered={self.frames_rendered}, "
            f"frames_accumulated={self.frames_accumulated})"
        )
