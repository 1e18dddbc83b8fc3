import random

import pytest

from courtshuffle.models import Game, Player, Round
from courtshuffle.sync import InMemorySessionStore, ManualClock, ManualScheduler


def make_players(men=0, women=0, unspecified=0):
    players = []
    for i in range(men):
        players.append(
            Player(id=f"m{i + 1}", display_name=f"Man {i + 1}", gender="male")
        )
    for i in range(women):
        players.append(
            Player(id=f"f{i + 1}", display_name=f"Woman {i + 1}", gender="female")
        )
    for i in range(unspecified):
        players.append(Player(id=f"u{i + 1}", display_name=f"Player {i + 1}"))
    return players


def make_schedule(rounds=2, games_per_round=2):
    """A fixed schedule of mixer rounds with distinct players per game."""
    schedule = []
    for r in range(rounds):
        games = []
        for g in range(games_per_round):
            ids = [f"p{g * 4 + k + 1}" for k in range(4)]
            team = [Player(id=pid, display_name=pid.upper()) for pid in ids]
            games.append(Game(id=f"r{r + 1}g{g + 1}", team1=team[:2], team2=team[2:]))
        schedule.append(Round(id=f"round-{r}", type="mixer", games=games))
    return schedule


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return ManualClock(start=1000.0)


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def store(clock):
    return InMemorySessionStore(clock=clock, rng=random.Random(99))
