import random

import pytest

from conftest import make_players
from courtshuffle.constants import NOTICE_MATCH_COMPLETE
from courtshuffle.controllers import Slot, SwapAction
from courtshuffle.exceptions import (
    InsufficientPlayersException,
    InvalidConfigurationException,
)
from courtshuffle.match import LiveMatch
from courtshuffle.models import MatchConfig, schedule_to_list


def _config(**kwargs):
    kwargs.setdefault("round_types", ["mixed", "mixer", "same-gender"])
    return MatchConfig(name="Tuesday", **kwargs)


def _device(store, scheduler, clock, user_id, players=(), **kwargs):
    return LiveMatch(
        list(players),
        config=_config(),
        rng=random.Random(7),
        store=store,
        scheduler=scheduler,
        clock=clock,
        user_id=user_id,
        **kwargs,
    )


def test_generate_shares_schedule_with_controllers():
    focus = []
    match = LiveMatch(
        make_players(men=5, women=4), config=_config(), on_focus=focus.append
    )

    schedule = match.generate()

    assert [r.type for r in schedule] == ["mixed", "mixer", "same-gender"]
    assert match.swap_engine.schedule is schedule
    assert match.scores.schedule is schedule
    assert focus[-1].key == "0_0_t1"


def test_generate_without_players_fails():
    with pytest.raises(InsufficientPlayersException):
        LiveMatch([]).generate()


def test_reshuffle_keeps_round_types_and_clears_scores():
    players = make_players(men=4, women=4)
    match = LiveMatch(players, config=_config(), rng=random.Random(1))
    match.generate(["same-gender", "mixed"])
    match.enter_score(0, 0, "t1", "5")

    schedule = match.reshuffle()

    assert [r.type for r in schedule] == ["same-gender", "mixed"]
    assert match.scores.scores == {}


def test_rename_updates_roster():
    match = LiveMatch(make_players(unspecified=4))
    match.generate(["mixer", "mixer"])
    slot = Slot(0, 0, 1, 0)
    player_id = match.swap_engine.player_at(slot).id

    match.rename(slot, "Zed")

    assert match.players[player_id].display_name == "Zed"
    for round_data in match.schedule:
        game = round_data.games[0]
        names = {p.display_name for p in game.players if p.id == player_id}
        assert names == {"Zed"}


def test_tap_swaps_within_round():
    match = LiveMatch(make_players(unspecified=8), rng=random.Random(2))
    match.generate(["mixer"])
    first = match.swap_engine.player_at(Slot(0, 0, 1, 0))
    second = match.swap_engine.player_at(Slot(0, 1, 2, 1))

    match.tap(Slot(0, 0, 1, 0))
    outcome = match.tap(Slot(0, 1, 2, 1))

    assert outcome.action == SwapAction.SWAPPED
    assert match.schedule[0].games[0].team1[0] is second
    assert match.schedule[0].games[1].team2[1] is first


def test_local_match_scores_without_sync():
    completed = []
    match = LiveMatch(
        make_players(unspecified=4), on_complete=lambda: completed.append(1)
    )
    match.generate(["mixer"])

    result = match.enter_score(0, 0, "t2", "7")

    assert (result.s1, result.s2, result.changed) == ("11", "7", True)
    assert match.is_complete()
    assert completed == [1]
    assert [g.court_number for g in match.completed_games()] == [1]
    with pytest.raises(InvalidConfigurationException):
        match.invite()


def test_set_winning_score_updates_config():
    match = LiveMatch(make_players(unspecified=4))
    assert match.set_winning_score("15") == 15
    assert match.config.winning_score == 15
    assert match.scores.winning_score == 15


def test_empty_schedule_is_not_complete():
    assert not LiveMatch(make_players(unspecified=4)).is_complete()


def test_store_requires_scheduler(store):
    with pytest.raises(InvalidConfigurationException):
        LiveMatch([], store=store)


def test_join_adopts_schedule_roster_and_scores(store, scheduler, clock):
    creator = _device(store, scheduler, clock, "creator", make_players(men=4, women=4))
    creator.generate()
    creator.enter_score(0, 0, "t1", "5")
    session = creator.invite()

    joiner = LiveMatch([], store=store, scheduler=scheduler, clock=clock, user_id="j")
    joiner.join(session.share_code.lower())

    assert joiner.name == "Tuesday"
    assert schedule_to_list(joiner.schedule) == schedule_to_list(creator.schedule)
    assert sorted(joiner.players) == sorted(creator.players)
    assert joiner.scores.scores == {"0_0_t1": "5", "0_0_t2": "11"}
    assert joiner.swap_engine.schedule is joiner.schedule


def test_scores_flow_both_ways(store, scheduler, clock):
    creator = _device(store, scheduler, clock, "creator", make_players(unspecified=8))
    creator.generate(["mixer"])
    session = creator.invite()
    joiner = _device(store, scheduler, clock, "joiner")
    joiner.join(session.share_code)

    joiner.enter_score(0, 1, "t1", "4")
    scheduler.advance(creator.config.poll_interval)

    assert creator.scores.get(0, 1, "t1") == "4"
    assert creator.scores.get(0, 1, "t2") == "11"
    assert creator.session.connected_count == 2


def test_finish_reaches_collaborators(store, scheduler, clock):
    finished, notices = [], []
    creator = _device(store, scheduler, clock, "creator", make_players(unspecified=4))
    creator.generate(["mixer"])
    session = creator.invite()
    joiner = _device(
        store,
        scheduler,
        clock,
        "joiner",
        on_finished=finished.append,
        on_notice=notices.append,
    )
    joiner.join(session.share_code)

    creator.finish()
    scheduler.advance(joiner.config.poll_interval)

    assert finished == ["Tuesday"]
    assert notices[-1] == NOTICE_MATCH_COMPLETE
    assert joiner.enter_score(0, 0, "t1", "3") is None
    assert creator.sync.finished


def test_leave_detaches(store, scheduler, clock):
    match = _device(store, scheduler, clock, "creator", make_players(unspecified=4))
    match.generate(["mixer"])
    match.invite()

    match.leave()

    assert match.session is None
    assert scheduler.pending == 0


def test_round_trip_through_dict():
    players = make_players(men=3, women=3)
    match = LiveMatch(players, config=_config(), rng=random.Random(4))
    match.generate()
    match.enter_score(1, 0, "t1", "9")
    match.rename(Slot(0, 0, 2, 1), "Renamed")

    restored = LiveMatch.from_dict(match.to_dict())

    assert restored.to_dict() == match.to_dict()
    assert restored.scores.get(1, 0, "t2") == "11"
