"""Per-tick kinematics for the claw and the bats.

One call to :meth:`PhysicsIntegrator.step` is one fixed tick. Speeds are
expressed per tick, matching the frame-locked feel of the arcade cabinet.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional

from .constants import (
	BOUNCE_JITTER,
	BOUNCE_RESTITUTION,
	CHAIN_LENGTH,
	DIAGONAL_FACTOR,
	ESCAPE_JITTER,
	ESCAPE_RANGE_FACTOR,
	ESCAPE_SPEED,
	FIELD_TOP,
	GRAVITY,
	HEIGHT,
	MAX_FALL_SPEED,
	MAX_SWING_ANGLE,
	MAX_TOKEN_SPEED,
	PLAY_MARGIN,
	SWING_DAMPING,
	SWING_INPUT_GAIN,
	SWING_RESTORE,
	TOKEN_FRICTION,
	WIDTH,
)
from .entities import Claw, DifficultyTier, RunState, Token


def clamp(value: float, low: float, high: float) -> float:
	return max(low, min(high, value))


def finite_or_zero(value: float) -> float:
	return value if math.isfinite(value) else 0.0


@dataclass
class ClawInput:
	left: bool = False
	right: bool = False
	up: bool = False
	down: bool = False

	@property
	def dx(self) -> int:
		return int(self.right) - int(self.left)

	@property
	def dy(self) -> int:
		return int(self.down) - int(self.up)

	@property
	def horizontal(self) -> bool:
		return self.dx != 0

	@property
	def vertical(self) -> bool:
		return self.dy != 0


class PhysicsIntegrator:
	def __init__(
		self,
		rng: Optional[random.Random] = None,
		width: int = WIDTH,
		height: int = HEIGHT,
		margin: int = PLAY_MARGIN,
		field_top: int = FIELD_TOP,
		restitution: float = BOUNCE_RESTITUTION,
		friction: float = TOKEN_FRICTION,
	) -> None:
		self.rng = rng or random.Random()
		self.width = width
		self.height = height
		self.margin = margin
		self.field_top = field_top
		self.restitution = restitution
		self.friction = friction

	def step(self, state: RunState, controls: ClawInput) -> int:
		"""Advance one tick and return how many bats were startled away."""
		tier = state.tier
		self.move_claw(state.claw, controls)
		self.swing_claw(state.claw, controls, tier)
		self.update_held(state)
		escaped = 0
		for token in state.free:
			if self.apply_escape(token, state.claw, tier, state.powerup_active("MAGNET")):
				escaped += 1
			self.integrate_free(token)
		return escaped

	def move_claw(self, claw: Claw, controls: ClawInput) -> None:
		speed = claw.speed
		if controls.horizontal and controls.vertical:
			speed *= DIAGONAL_FACTOR
		claw.x = clamp(claw.x + controls.dx * speed, self.margin, self.width - self.margin)
		claw.y = clamp(claw.y + controls.dy * speed, self.margin, self.height - self.margin)

	def swing_claw(self, claw: Claw, controls: ClawInput, tier: DifficultyTier) -> None:
		# The string lags behind the trolley, so moving right swings the claw left.
		accel = -SWING_RESTORE * math.sin(claw.angle)
		accel -= controls.dx * tier.swing_force * SWING_INPUT_GAIN
		claw.swing_velocity = finite_or_zero((claw.swing_velocity + accel) * SWING_DAMPING)
		angle = finite_or_zero(claw.angle + claw.swing_velocity)
		if abs(angle) >= MAX_SWING_ANGLE:
			angle = math.copysign(MAX_SWING_ANGLE, angle)
			claw.swing_velocity = 0.0
		claw.angle = angle

	def hold_position(self, claw: Claw) -> tuple[float, float]:
		return claw.effective_x, claw.y + CHAIN_LENGTH

	def update_held(self, state: RunState) -> None:
		claw = state.claw
		for token in state.held:
			if not claw.is_open:
				token.x, token.y = self.hold_position(claw)
				token.vx = 0.0
				token.vy = 0.0
				continue
			half = token.size / 2
			token.vy = clamp(finite_or_zero(token.vy) + GRAVITY, -MAX_FALL_SPEED, MAX_FALL_SPEED)
			token.y = clamp(token.y + token.vy, half, self.height - half)
			token.x = clamp(token.x + finite_or_zero(token.vx), self.margin, self.width - self.margin)

	def in_escape_range(self, token: Token, claw: Claw) -> bool:
		gx, gy = claw.grab_point()
		return math.hypot(token.x - gx, token.y - gy) < claw.size * ESCAPE_RANGE_FACTOR

	def escape_chance(self, tier: DifficultyTier, magnet_active: bool) -> float:
		chance = tier.drop_chance
		if not magnet_active:
			chance *= 2
		return chance

	def apply_escape(
		self,
		token: Token,
		claw: Claw,
		tier: DifficultyTier,
		magnet_active: bool,
	) -> bool:
		if token.selected or not self.in_escape_range(token, claw):
			return False
		if self.rng.random() >= self.escape_chance(tier, magnet_active):
			return False
		gx, gy = claw.grab_point()
		angle = math.atan2(token.y - gy, token.x - gx)
		if token.x == gx and token.y == gy:
			angle = math.pi / 2
		token.vx = math.cos(angle) * ESCAPE_SPEED + self.rng.uniform(-ESCAPE_JITTER, ESCAPE_JITTER)
		token.vy = math.sin(angle) * ESCAPE_SPEED + self.rng.uniform(-ESCAPE_JITTER, ESCAPE_JITTER)
		return True

	def integrate_free(self, token: Token) -> None:
		token.vx = clamp(finite_or_zero(token.vx), -MAX_TOKEN_SPEED, MAX_TOKEN_SPEED)
		token.vy = clamp(finite_or_zero(token.vy), -MAX_TOKEN_SPEED, MAX_TOKEN_SPEED)
		left, right = self.margin, self.width - self.margin
		top, bottom = self.field_top, self.height - self.margin
		token.x = clamp(token.x + token.vx, left, right)
		token.y = clamp(token.y + token.vy, top, bottom)

		if token.x <= left or token.x >= right:
			token.vx *= -self.restitution
			token.vy += self.rng.uniform(-BOUNCE_JITTER, BOUNCE_JITTER)
		if token.y <= top or token.y >= bottom:
			token.vy *= -self.restitution
			token.vx += self.rng.uniform(-BOUNCE_JITTER, BOUNCE_JITTER)

		token.vx *= self.friction
		token.vy *= self.friction
