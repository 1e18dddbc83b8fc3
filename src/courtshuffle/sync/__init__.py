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

# QtScheduler lives in courtshuffle.sync.qt_scheduler and needs the gui extra

from courtshuffle.sync.clock import Clock, ManualClock, SystemClock
from courtshuffle.sync.engine import (
    SyncEngine,
    SyncSession,
    SyncState,
    normalize_share_code,
    scores_from_updates,
)
from courtshuffle.sync.http_store import HttpSessionStore
from courtshuffle.sync.protection import ProtectedKeys
from courtshuffle.sync.scheduler import ManualScheduler, Scheduler, TimerHandle
from courtshuffle.sync.settings import SyncSettings
from courtshuffle.sync.store import (
    CreatedSession,
    InMemorySessionStore,
    JoinedSession,
    PollResponse,
    RemoteSessionStore,
    ScoreUpdate,
)

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "Scheduler",
    "ManualScheduler",
    "TimerHandle",
    "ProtectedKeys",
    "ScoreUpdate",
    "CreatedSession",
    "JoinedSession",
    "PollResponse",
    "RemoteSessionStore",
    "InMemorySessionStore",
    "HttpSessionStore",
    "SyncSettings",
    "SyncEngine",
    "SyncSession",
    "SyncState",
    "normalize_share_code",
    "scores_from_updates",
]
