import pytest

from conftest import make_players, make_schedule
from courtshuffle.exceptions import InvalidConfigurationException
from courtshuffle.models import (
    MatchConfig,
    PartnerHistory,
    Player,
    partner_conflicts,
    schedule_from_list,
    schedule_to_list,
)
from courtshuffle.sync import ScoreUpdate, SyncSettings
from courtshuffle.utils import game_keys, parse_score_key, score_key, sibling_team


@pytest.mark.parametrize(
    "gender,female",
    [("female", True), ("F", True), (" f ", True), ("male", False), (None, False)],
)
def test_gender_is_read_from_first_letter(gender, female):
    player = Player(id="x", display_name="X", gender=gender)
    assert player.is_female is female
    assert player.is_male is not female


def test_player_from_roster_payload():
    player = Player.from_dict({"id": 7, "first_name": "Ana", "gender": "female"})
    assert (player.id, player.display_name, player.gender) == ("7", "Ana", "female")


def test_schedule_survives_serialization():
    schedule = make_schedule()
    restored = schedule_from_list(schedule_to_list(schedule))
    assert schedule_to_list(restored) == schedule_to_list(schedule)


def test_schedule_from_list_fills_missing_ids_and_aliases():
    players = [p.to_dict() for p in make_players(unspecified=4)]
    data = [
        {
            "type": "gender",
            "games": [{"team1": players[:2], "team2": players[2:]}],
        }
    ]
    schedule = schedule_from_list(data)
    assert schedule[0].id == "round-0"
    assert schedule[0].type == "same-gender"
    assert schedule[0].games[0].id == "game-0-0"


def test_partner_conflicts_count_repeated_teams():
    schedule = make_schedule(rounds=3)
    conflicts = partner_conflicts(schedule)
    assert conflicts["p1-p2"] == 3

    history = PartnerHistory.from_schedule(schedule)
    assert ("p1-p2", 3) in history.repeated_pairs()
    assert PartnerHistory.from_dict(history.to_dict()).counts == history.counts


def test_score_keys():
    assert score_key(2, 1, "t2") == "2_1_t2"
    assert game_keys(0, 3) == ("0_3_t1", "0_3_t2")
    assert parse_score_key("2_1_t2") == (2, 1, "t2")
    assert parse_score_key("x_1_t2") is None
    assert parse_score_key("2_1_t3") is None
    assert sibling_team("t1") == "t2"
    assert sibling_team("t2") == "t1"


def test_match_config_defaults_and_round_trip():
    config = MatchConfig()
    assert config.winning_score == 11
    assert config.round_types == ["mixer"] * 5
    assert MatchConfig.from_dict(config.to_dict()) == config


@pytest.mark.parametrize(
    "kwargs",
    [
        {"round_types": ["doubles"]},
        {"winning_score": 0},
        {"max_shuffle_attempts": 0},
        {"poll_interval": 0},
        {"protection_window": -1},
    ],
)
def test_match_config_rejects_bad_values(kwargs):
    with pytest.raises(InvalidConfigurationException):
        MatchConfig(**kwargs)


def test_score_update_uses_wire_names():
    update = ScoreUpdate(1, 2, "11", "4", updated_at=99)
    data = update.to_dict()
    assert data["s1_str"] == "11" and data["s2_str"] == "4"
    assert ScoreUpdate.from_dict(data) == update


def test_sync_settings_from_env():
    settings = SyncSettings.from_env(
        {
            "COURTSHUFFLE_API_URL": "https://example.org/api/",
            "COURTSHUFFLE_HTTP_TIMEOUT": "2.5",
            "COURTSHUFFLE_USER_ID": "42",
        }
    )
    assert settings.api_url == "https://example.org/api"
    assert settings.timeout == 2.5
    assert settings.user_id == "42"

    defaults = SyncSettings.from_env({"COURTSHUFFLE_API_URL": "http://x"})
    assert defaults.timeout == 10.0
    assert defaults.user_id is None


@pytest.mark.parametrize(
    "env",
    [
        {},
        {"COURTSHUFFLE_API_URL": "  "},
        {"COURTSHUFFLE_API_URL": "http://x", "COURTSHUFFLE_HTTP_TIMEOUT": "soon"},
        {"COURTSHUFFLE_API_URL": "http://x", "COURTSHUFFLE_HTTP_TIMEOUT": "0"},
    ],
)
def test_sync_settings_reject_bad_env(env):
    with pytest.raises(InvalidConfigurationException):
        SyncSettings.from_env(env)
