"""Qt timer backend for the sync scheduler."""

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

from typing import Callable, List

from PyQt6 import QtCore

from courtshuffle.sync.scheduler import Scheduler, TimerHandle


class QtTimerHandle(TimerHandle):
    """Wraps a ``QTimer`` so it can be cancelled like any other timer."""

    def __init__(
        self, timer: QtCore.QTimer, on_cancel: Callable[["QtTimerHandle"], None]
    ):
        super().__init__()
        self.timer = timer
        self._on_cancel = on_cancel

    def cancel(self) -> None:
        super().cancel()
        self.timer.stop()
        self._on_cancel(self)


class QtScheduler(Scheduler):
    """Runs callbacks from the Qt event loop of the calling thread.

    Timers keep a reference here until they are cancelled or, for one-shot
    timers, until they fire.
    """

    def __init__(self, parent: QtCore.QObject = None):
        self.parent = parent
        self._handles: List[QtTimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._start(delay, callback, single_shot=True)

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        return self._start(interval, callback, single_shot=False)

    def _start(
        self, seconds: float, callback: Callable[[], None], single_shot: bool
    ) -> QtTimerHandle:
        timer = QtCore.QTimer(self.parent)
        timer.setSingleShot(single_shot)
        timer.setInterval(int(seconds * 1000))
        handle = QtTimerHandle(timer, self._forget)

        def fire():
            if single_shot:
                handle.active = False
                self._forget(handle)
            callback()

        timer.timeout.connect(fire)
        self._handles.append(handle)
        timer.start()
        return handle

    def _forget(self, handle: QtTimerHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()
