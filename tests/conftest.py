import random

import pytest

from fangclaw.entities import Claw, RunState
from fangclaw.game import FangClawGame, GameState
from fangclaw.highscore import HighScoreBook, MemoryStore
from fangclaw.interactions import InteractionResolver
from fangclaw.powerups import PowerUpManager
from fangclaw.scheduler import Scheduler


class StubRandom:
    """Stand-in RNG whose rolls are pinned so outcomes can be forced."""

    def __init__(self, roll=0.99):
        self.roll = roll

    def random(self):
        return self.roll

    def uniform(self, a, b):
        return (a + b) / 2

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def stub_rng():
    return StubRandom()


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def powerups(scheduler, stub_rng):
    return PowerUpManager(scheduler, rng=stub_rng)


@pytest.fixture
def resolver(powerups, stub_rng):
    return InteractionResolver(powerups, rng=stub_rng)


@pytest.fixture
def empty_state():
    state = RunState()
    state.claw = Claw()
    return state


@pytest.fixture
def game(rng):
    return FangClawGame(highscores=HighScoreBook(MemoryStore()), rng=rng)


@pytest.fixture
def playing_game(game):
    game.press_primary()
    while game.mode is GameState.STORY:
        game.press_primary()
    return game
