"""Timer abstraction used for polling and transient notices.

All callbacks run on the thread that owns the scheduler, so code driven by a
scheduler never needs locks.
"""

# Court Shuffle
# Copyright (C) 2025  Court Shuffle developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import heapq
import itertools
from typing import Callable, List, Optional, Tuple

from courtshuffle.sync.clock import ManualClock


class TimerHandle:
    """Handle to a scheduled callback."""

    def __init__(self):
        self.active = True

    def cancel(self) -> None:
        self.active = False


class Scheduler:
    """Interface for one-shot and repeating timers."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError


class _ManualTimer(TimerHandle):
    def __init__(self, callback: Callable[[], None], interval: Optional[float]):
        super().__init__()
        self.callback = callback
        self.interval = interval


class ManualScheduler(Scheduler):
    """Scheduler driven by a :class:`ManualClock`.

    Timers fire only inside :meth:`advance`, in due-time order, with the clock
    set to each timer's due time before its callback runs.
    """

    def __init__(self, clock: Optional[ManualClock] = None):
        self.clock = clock if clock is not None else ManualClock()
        self._queue: List[Tuple[float, int, _ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._push(delay, _ManualTimer(callback, None))

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("Interval must be positive")
        return self._push(interval, _ManualTimer(callback, interval))

    def _push(self, delay: float, timer: _ManualTimer) -> _ManualTimer:
        due = self.clock.now() + delay
        heapq.heappush(self._queue, (due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, timer in self._queue if timer.active)

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer that falls due.

        Returns:
            Number of callbacks run
        """
        target = self.clock.now() + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if not timer.active:
                continue
            if due > self.clock.now():
                self.clock.advance(due - self.clock.now())
            if timer.interval is not None:
                self._push(timer.interval, timer)
            else:
                timer.active = False
            timer.callback()
            fired += 1
        if target > self.clock.now():
            self.clock.advance(target - self.clock.now())
        return fired
