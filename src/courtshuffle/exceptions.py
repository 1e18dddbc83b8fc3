"""Exceptions for use in Court Shuffle"""

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


# ========== Base Application Exception ==========


class CourtShuffleException(Exception):
    """Base exception for all Court Shuffle errors.

    All custom exceptions in the application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ========== Schedule Exceptions ==========


class ScheduleException(CourtShuffleException):
    """Base exception for schedule generation errors."""

    pass


class InvalidRoundTypeException(ScheduleException):
    """Raised when a round type request is not mixed, same-gender or mixer."""

    pass


class InsufficientPlayersException(ScheduleException):
    """Raised when a reshuffle is requested without any players."""

    pass


# ========== Swap Exceptions ==========


class SwapException(CourtShuffleException):
    """Base exception for swap and rename errors."""

    pass


class SlotNotFoundException(SwapException):
    """Raised when a slot address does not exist in the schedule."""

    pass


class CrossRoundSwapException(SwapException):
    """Raised when a swap between two different rounds is forced."""

    pass


# ========== Score Exceptions ==========


class ScoreException(CourtShuffleException):
    """Base exception for score entry errors."""

    pass


class InvalidScoreKeyException(ScoreException):
    """Raised when a score key does not address a game in the schedule."""

    pass


class InvalidWinningScoreException(ScoreException):
    """Raised when the winning score is not a positive integer."""

    pass


# ========== Sync Exceptions ==========


class SyncException(CourtShuffleException):
    """Base exception for collaborative sync errors."""

    pass


class NetworkException(SyncException):
    """Raised when the remote session store cannot be reached or answers badly."""

    pass


class SessionNotInitializedException(SyncException):
    """Raised when an operation needs a created or joined session."""

    pass


class SessionCreateException(SyncException):
    """Raised when a collaborative session could not be created."""

    pass


class SessionJoinException(SyncException):
    """Raised when a collaborative session could not be joined."""

    pass


class InvalidShareCodeException(SessionJoinException):
    """Raised when a share code is malformed."""

    pass


class SessionFinishedException(SyncException):
    """Raised when scores are written after the session was finished."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(CourtShuffleException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
