import math
import random

import pytest

from fangclaw.constants import (
    CHAIN_LENGTH,
    CLAW_SPEED,
    HEIGHT,
    MAX_SWING_ANGLE,
    MAX_TOKEN_SPEED,
    PLAY_MARGIN,
    WIDTH,
)
from fangclaw.entities import DIFFICULTY_TIERS, Claw, Collectible, RunState, difficulty_for_level
from fangclaw.physics import ClawInput, PhysicsIntegrator


class FixedRoll(random.Random):
    def __init__(self, roll):
        super().__init__(99)
        self.roll = roll

    def random(self):
        return self.roll


def test_tiers_follow_level():
    assert difficulty_for_level(1).name == "easy"
    assert difficulty_for_level(2).name == "easy"
    assert difficulty_for_level(3).name == "medium"
    assert difficulty_for_level(4).name == "medium"
    assert difficulty_for_level(5).name == "hard"
    assert difficulty_for_level(12).name == "hard"


def test_claw_moves_and_stays_inside_margins():
    physics = PhysicsIntegrator(rng=random.Random(0))
    claw = Claw()

    physics.move_claw(claw, ClawInput(right=True))
    assert claw.x == WIDTH / 2 + CLAW_SPEED

    for _ in range(200):
        physics.move_claw(claw, ClawInput(right=True, down=True))
    assert claw.x == WIDTH - PLAY_MARGIN
    assert claw.y == HEIGHT - PLAY_MARGIN

    for _ in range(200):
        physics.move_claw(claw, ClawInput(left=True, up=True))
    assert claw.x == PLAY_MARGIN
    assert claw.y == PLAY_MARGIN


def test_diagonal_movement_is_scaled():
    physics = PhysicsIntegrator(rng=random.Random(0))
    claw = Claw(x=300, y=300)

    physics.move_claw(claw, ClawInput(right=True, down=True))

    assert claw.x == pytest.approx(300 + CLAW_SPEED * 0.707)
    assert claw.y == pytest.approx(300 + CLAW_SPEED * 0.707)


def test_swing_lags_opposite_to_motion_and_is_bounded():
    physics = PhysicsIntegrator(rng=random.Random(0))
    claw = Claw()
    tier = DIFFICULTY_TIERS["hard"]

    physics.swing_claw(claw, ClawInput(right=True), tier)
    assert claw.angle < 0

    for _ in range(1000):
        physics.swing_claw(claw, ClawInput(right=True), tier)
    assert abs(claw.angle) <= MAX_SWING_ANGLE


def test_swing_settles_back_without_input():
    physics = PhysicsIntegrator(rng=random.Random(0))
    claw = Claw(angle=0.3)

    for _ in range(3000):
        physics.swing_claw(claw, ClawInput(), DIFFICULTY_TIERS["easy"])

    assert abs(claw.angle) < 0.05


def test_held_bat_hangs_under_closed_claw():
    physics = PhysicsIntegrator(rng=random.Random(0))
    state = RunState()
    state.claw = Claw(x=200, y=300, is_open=False)
    bat = Collectible(x=10, y=10, vx=3, vy=4, selected=True)
    state.held.append(bat)

    physics.update_held(state)

    assert bat.x == pytest.approx(state.claw.effective_x)
    assert bat.y == 300 + CHAIN_LENGTH
    assert (bat.vx, bat.vy) == (0.0, 0.0)


def test_free_bat_bounces_off_wall():
    physics = PhysicsIntegrator(rng=random.Random(0))
    bat = Collectible(x=WIDTH - PLAY_MARGIN - 1, y=300, vx=5, vy=0)

    physics.integrate_free(bat)

    assert bat.x == WIDTH - PLAY_MARGIN
    assert bat.vx < 0
    assert abs(bat.vx) == pytest.approx(5 * 1.1 * 0.998)


def test_friction_slows_free_bat():
    physics = PhysicsIntegrator(rng=random.Random(0))
    bat = Collectible(x=300, y=300, vx=2, vy=-1)

    physics.integrate_free(bat)

    assert bat.x == 302
    assert bat.y == 299
    assert bat.vx == pytest.approx(2 * 0.998)
    assert bat.vy == pytest.approx(-1 * 0.998)


def test_speed_is_clamped_and_nan_is_zeroed():
    physics = PhysicsIntegrator(rng=random.Random(0))
    fast = Collectible(x=300, y=300, vx=500, vy=float("nan"))

    physics.integrate_free(fast)

    assert fast.x == 300 + MAX_TOKEN_SPEED
    assert fast.y == 300
    assert math.isfinite(fast.vx) and math.isfinite(fast.vy)


def test_escape_pushes_bat_away_on_hard_tier():
    physics = PhysicsIntegrator(rng=FixedRoll(0.0))
    claw = Claw(x=300, y=300)
    gx, gy = claw.grab_point()
    bat = Collectible(x=gx + 100, y=gy)

    escaped = physics.apply_escape(bat, claw, DIFFICULTY_TIERS["hard"], magnet_active=False)

    assert escaped is True
    assert 2.5 <= bat.vx <= 3.5
    assert -0.5 <= bat.vy <= 0.5


def test_escape_roll_above_chance_leaves_bat_alone():
    physics = PhysicsIntegrator(rng=FixedRoll(0.69))
    claw = Claw(x=300, y=300)
    gx, gy = claw.grab_point()
    bat = Collectible(x=gx, y=gy + 50, vx=1, vy=1)

    escaped = physics.apply_escape(bat, claw, DIFFICULTY_TIERS["hard"], magnet_active=True)

    assert escaped is False
    assert (bat.vx, bat.vy) == (1, 1)


def test_escape_chance_doubles_without_magnet():
    physics = PhysicsIntegrator(rng=random.Random(0))
    tier = DIFFICULTY_TIERS["medium"]

    assert physics.escape_chance(tier, magnet_active=True) == 0.25
    assert physics.escape_chance(tier, magnet_active=False) == 0.5


def test_far_or_held_bats_never_escape():
    physics = PhysicsIntegrator(rng=FixedRoll(0.0))
    claw = Claw(x=100, y=100)
    far = Collectible(x=650, y=550)
    held = Collectible(x=100, y=120, selected=True)

    assert physics.apply_escape(far, claw, DIFFICULTY_TIERS["hard"], False) is False
    assert physics.apply_escape(held, claw, DIFFICULTY_TIERS["hard"], False) is False


def test_step_keeps_free_bats_in_bounds(rng):
    physics = PhysicsIntegrator(rng=rng)
    state = RunState(level=6)
    state.free = [
        Collectible(x=rng.uniform(60, 660), y=rng.uniform(110, 550), vx=8, vy=-8)
        for _ in range(10)
    ]

    for _ in range(600):
        physics.step(state, ClawInput(left=True, down=True))

    for bat in state.free:
        assert PLAY_MARGIN <= bat.x <= WIDTH - PLAY_MARGIN
        assert 100 <= bat.y <= HEIGHT - PLAY_MARGIN
        assert abs(bat.vx) <= MAX_TOKEN_SPEED * 1.1 + 1
