import pytest

from fangclaw.constants import CLAW_SIZE, DROP_VY
from fangclaw.entities import Collectible
from fangclaw.highscore import HighScoreBook, MemoryStore
from fangclaw.levels import LevelController
from fangclaw.powerups import POWERUP_TYPES, PowerUpManager, powerup_count


def test_catalogue_matches_durations():
    assert POWERUP_TYPES["MAGNET"].duration_ms == 15000
    assert POWERUP_TYPES["DOUBLE_POINTS"].duration_ms == 20000
    assert POWERUP_TYPES["SLOW_TIME"].duration_ms == 15000


def test_powerup_count_per_level():
    assert [powerup_count(level) for level in range(1, 9)] == [0, 1, 1, 2, 2, 3, 3, 3]


def test_magnet_twice_grows_once_and_restarts_timer(powerups, scheduler, empty_state):
    powerups.activate(empty_state, "MAGNET", now_ms=1000)
    powerups.activate(empty_state, "MAGNET", now_ms=6000)

    assert empty_state.claw.size == CLAW_SIZE * 1.5 == 360
    assert powerups.expiry_deadline("MAGNET") == 21000

    scheduler.run_due(16000)
    assert empty_state.powerup_active("MAGNET")

    scheduler.run_due(21000)
    assert not empty_state.powerup_active("MAGNET")
    assert empty_state.claw.size == CLAW_SIZE


def test_activation_message_names_duration(powerups, empty_state):
    message = powerups.activate(empty_state, "SLOW_TIME", now_ms=0)

    assert message.text == "Slow Motion ACTIVATED!\n(15s)"
    assert message.category == "powerup"


def test_slow_time_halves_then_restores_free_bats(powerups, scheduler, empty_state):
    bat = Collectible(vx=4, vy=-2)
    empty_state.free = [bat]

    powerups.activate(empty_state, "SLOW_TIME", now_ms=0)
    assert (bat.vx, bat.vy) == (2, -1)

    scheduler.run_due(15000)
    assert (bat.vx, bat.vy) == (4, -2)


def test_expiry_notifies_listener(scheduler, empty_state):
    seen = []
    manager = PowerUpManager(scheduler, on_message=seen.append)

    manager.activate(empty_state, "DOUBLE_POINTS", now_ms=0)
    scheduler.run_due(20000)

    assert [message.text for message in seen] == ["2x Points EXPIRED"]


def test_unknown_kind_is_rejected(powerups, empty_state):
    with pytest.raises(KeyError):
        powerups.activate(empty_state, "TELEPORT", now_ms=0)


def test_level_reset_drops_pending_magnet_expiry(powerups, scheduler, empty_state, rng):
    levels = LevelController(powerups, HighScoreBook(MemoryStore()), rng=rng)
    powerups.activate(empty_state, "MAGNET", now_ms=0)
    assert empty_state.claw.size == 360

    levels.reset_level(empty_state, 2)

    assert scheduler.deadline("powerup:MAGNET") is None
    assert not empty_state.powerup_active("MAGNET")
    scheduler.run_due(60000)
    assert empty_state.claw.size == CLAW_SIZE
    assert powerups.active_kinds(empty_state) == frozenset()


def test_clear_does_not_reverse_effects(powerups, empty_state):
    bat = Collectible(vx=4, vy=4)
    empty_state.free = [bat]
    powerups.activate(empty_state, "SLOW_TIME", now_ms=0)

    powerups.clear(empty_state)

    assert (bat.vx, bat.vy) == (2, 2)
    assert not empty_state.powerup_active("SLOW_TIME")


def test_magnet_expiry_drops_the_second_held_bat(powerups, resolver, scheduler, empty_state):
    powerups.activate(empty_state, "MAGNET", now_ms=0)
    gx, gy = empty_state.claw.grab_point()
    first = Collectible(x=gx, y=gy)
    second = Collectible(x=gx, y=gy, color="blue")
    empty_state.free = [first, second]
    resolver.grab(empty_state)
    empty_state.claw.is_open = False
    assert len(empty_state.held) == 2

    scheduler.run_due(15000)

    assert not empty_state.powerup_active("MAGNET")
    assert empty_state.held == [first]
    assert empty_state.free == [second]
    assert first.selected
    assert not second.selected
    assert second.vy == DROP_VY
    for bat in (first, second):
        homes = [bat in empty_state.free, bat in empty_state.held, bat in empty_state.collected]
        assert homes.count(True) == 1


def test_slow_time_expiry_speeds_up_bats_dropped_meanwhile(powerups, scheduler, empty_state):
    powerups.activate(empty_state, "SLOW_TIME", now_ms=0)
    late = Collectible(vx=1, vy=2)
    empty_state.free.append(late)

    scheduler.run_due(15000)

    assert (late.vx, late.vy) == (2, 4)
