"""Plain records for the claw, the bats it chases, the difficulty tiers and the run state."""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .constants import (
	BASE_REQUIRED_POINTS,
	CLAW_HOME_Y,
	CLAW_SIZE,
	CLAW_SPEED,
	COLOR_VALUES,
	DEFAULT_COLOR_VALUE,
	DROP_VX_SPREAD,
	DROP_VY,
	GRAB_OFFSET_Y,
	LEVEL_TIME,
	POWERUP_KINDS,
	POWERUP_SIZE,
	POWERUP_VALUE,
	SWING_OFFSET,
	TOKEN_SIZE,
	WIDTH,
)


def color_value(color: str) -> int:
	return COLOR_VALUES.get(color, DEFAULT_COLOR_VALUE)


@dataclass(eq=False)
class Token(ABC):
	x: float = 0.0
	y: float = 0.0
	vx: float = 0.0
	vy: float = 0.0
	size: float = TOKEN_SIZE
	selected: bool = False

	@property
	def is_powerup(self) -> bool:
		return False

	@property
	def value(self) -> int:
		return 0

	@property
	@abstractmethod
	def category(self) -> str: ...


@dataclass(eq=False)
class Collectible(Token):
	color: str = "red"

	@property
	def value(self) -> int:
		return color_value(self.color)

	@property
	def category(self) -> str:
		return self.color


@dataclass(eq=False)
class PowerUpToken(Token):
	kind: str = "MAGNET"
	size: float = POWERUP_SIZE

	@property
	def is_powerup(self) -> bool:
		return True

	@property
	def value(self) -> int:
		return POWERUP_VALUE

	@property
	def category(self) -> str:
		return self.kind


@dataclass
class Claw:
	x: float = WIDTH / 2
	y: float = CLAW_HOME_Y
	size: float = CLAW_SIZE
	is_open: bool = True
	speed: float = CLAW_SPEED
	angle: float = 0.0
	swing_velocity: float = 0.0

	@property
	def effective_x(self) -> float:
		"""Horizontal draw position, nudged sideways by the swing."""
		return self.x + math.sin(self.angle) * SWING_OFFSET

	def grab_point(self) -> Tuple[float, float]:
		return self.effective_x, self.y + GRAB_OFFSET_Y


@dataclass(frozen=True)
class DifficultyTier:
	name: str
	drop_chance: float
	swing_force: float
	speed: float


DIFFICULTY_TIERS: Dict[str, DifficultyTier] = {
	"easy": DifficultyTier("easy", drop_chance=0.15, swing_force=0.1, speed=4),
	"medium": DifficultyTier("medium", drop_chance=0.25, swing_force=0.2, speed=5),
	"hard": DifficultyTier("hard", drop_chance=0.35, swing_force=0.3, speed=6),
}


def difficulty_for_level(level: int) -> DifficultyTier:
	if level <= 2:
		return DIFFICULTY_TIERS["easy"]
	if level <= 4:
		return DIFFICULTY_TIERS["medium"]
	return DIFFICULTY_TIERS["hard"]


@dataclass
class RunState:
	"""Everything a run mutates, owned by one game and passed to each system."""

	level: int = 1
	score: int = 0
	total_score: int = 0
	time_left: int = LEVEL_TIME
	required_points: int = BASE_REQUIRED_POINTS
	claw: Claw = field(default_factory=Claw)
	free: List[Token] = field(default_factory=list)
	held: List[Token] = field(default_factory=list)
	collected: List[Collectible] = field(default_factory=list)
	active_powerups: Dict[str, bool] = field(
		default_factory=lambda: {kind: False for kind in POWERUP_KINDS}
	)

	@property
	def tier(self) -> DifficultyTier:
		return difficulty_for_level(self.level)

	def powerup_active(self, kind: str) -> bool:
		return self.active_powerups.get(kind, False)

	def drop_to_pool(self, token: Token, rng: random.Random) -> None:
		"""Let go of ``token``: it leaves the claw and falls back into the free pool."""
		token.selected = False
		token.vy = DROP_VY
		token.vx = rng.uniform(-DROP_VX_SPREAD, DROP_VX_SPREAD)
		if token in self.held:
			self.held.remove(token)
		if token not in self.free:
			self.free.append(token)

	def collected_counts(self) -> Dict[str, int]:
		counts: Dict[str, int] = {}
		for token in self.collected:
			counts[token.color] = counts.get(token.color, 0) + 1
		return counts
