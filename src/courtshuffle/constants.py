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

# --- Constants ---

# Scoring
DEFAULT_WINNING_SCORE = 11
MAX_SCORE_DIGITS = 2

# Score map team keys
TEAM_1 = "t1"
TEAM_2 = "t2"
TEAM_KEYS = (TEAM_1, TEAM_2)

# Round types
ROUND_MIXED = "mixed"
ROUND_SAME_GENDER = "same-gender"
ROUND_MIXER = "mixer"
ROUND_TYPES = (ROUND_MIXED, ROUND_SAME_GENDER, ROUND_MIXER)

# Older saved schedules call same-gender rounds "gender"
ROUND_TYPE_ALIASES = {
    "gender": ROUND_SAME_GENDER,
    "same_gender": ROUND_SAME_GENDER,
}

# Used by reshuffle when there is no schedule to copy round types from
DEFAULT_ROUND_COUNT = 5
DEFAULT_ROUND_TYPE = ROUND_MIXER

# Generation
PLAYERS_PER_GAME = 4
PLAYERS_PER_TEAM = 2
MAX_SHUFFLE_ATTEMPTS = 200

# Collaborative sync (seconds)
POLL_INTERVAL = 3.0
PROTECTION_WINDOW = 4.0
NOTICE_DURATION = 3.0

# Share codes
SHARE_CODE_LENGTH = 6
SHARE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

# Remote session status values
SESSION_ACTIVE = "active"
SESSION_FINISHED = "finished"

# User-facing notices
NOTICE_SAME_ROUND_ONLY = "You can only swap players within the same round."
NOTICE_UPDATED_BY_COLLABORATOR = "Scores updated from collaborator"
NOTICE_MATCH_COMPLETE = "Match finished by a collaborator"

# HTTP store
DEFAULT_HTTP_TIMEOUT = 10.0
ENDPOINT_CREATE_SESSION = "collab_create_session.php"
ENDPOINT_JOIN_SESSION = "collab_join_match.php"
ENDPOINT_SYNC_SCORES = "collab_sync_scores.php"
ENDPOINT_GET_SCORES = "collab_get_scores.php"
ENDPOINT_FINISH_SESSION = "collab_finish_session.php"
