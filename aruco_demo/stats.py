from __future__ import annotations

import time
from typing import Callable

MS_DECAY = 0.98
FPS_DECAY = 0.7


class FpsStats:
    """Smoothed per-frame latency and frames-per-second estimate."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.avg_ms = 0.0
        self.avg_fps = 0.0
        self.rollovers = 0
        self._count = 0
        self._last_rollover = clock()

    def restart_clock(self) -> None:
        """Start the current one-second window now, dropping any pending count."""
        self._count = 0
        self._last_rollover = self._clock()

    def update_avg_ms(self, sample_ms: float) -> float:
        self.avg_ms = MS_DECAY * self.avg_ms + (1.0 - MS_DECAY) * float(sample_ms)
        return self.avg_ms

    def tick_fps(self) -> float:
        self._count += 1
        now = self._clock()
        if (now - self._last_rollover) * 1000.0 >= 1000.0:
            self.avg_fps = FPS_DECAY * self.avg_fps + (1.0 - FPS_DECAY) * self._count
            self._count = 0
            self._last_rollover = now
            self.rollovers += 1
        return self.avg_fps
