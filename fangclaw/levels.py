"""Level population, countdown and the win/lose rules for each level."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

import structlog

from .constants import (
	BASE_COLORS,
	BASE_REQUIRED_POINTS,
	BASE_TOKEN_COUNT,
	BASE_VELOCITY,
	COUNTDOWN_INTERVAL_MS,
	FIELD_TOP,
	GREEN_UNLOCK_LEVEL,
	HEIGHT,
	LEVEL_TIME,
	MAX_TOKEN_REDUCTIONS,
	PLAY_MARGIN,
	POWERUP_KINDS,
	POWERUP_VELOCITY,
	PURPLE_UNLOCK_LEVEL,
	REQUIRED_POINTS_STEP,
	TOKEN_COUNT_STEP,
	VELOCITY_PER_LEVEL,
	WIDTH,
)
from .entities import Claw, Collectible, PowerUpToken, RunState, Token
from .highscore import HighScoreBook
from .powerups import PowerUpManager, powerup_count

logger = structlog.get_logger()


def required_points(level: int) -> int:
	if level < 1:
		raise ValueError(f"level must be >= 1, got {level}")
	return BASE_REQUIRED_POINTS + (level - 1) * REQUIRED_POINTS_STEP


def token_count(level: int) -> int:
	reduction = min(max(level - 1, 0), MAX_TOKEN_REDUCTIONS)
	return BASE_TOKEN_COUNT - reduction * TOKEN_COUNT_STEP


def colors_for_level(level: int) -> List[str]:
	colors = list(BASE_COLORS)
	if level >= GREEN_UNLOCK_LEVEL:
		colors.append("green")
	if level >= PURPLE_UNLOCK_LEVEL:
		colors.append("purple")
	return colors


def base_velocity(level: int) -> float:
	return BASE_VELOCITY + level * VELOCITY_PER_LEVEL


@dataclass(frozen=True)
class GameOverResult:
	level: int
	level_score: int
	final_score: int
	high_score: int
	new_high_score: bool


class LevelController:
	def __init__(
		self,
		powerups: PowerUpManager,
		highscores: HighScoreBook,
		rng: Optional[random.Random] = None,
	) -> None:
		self.powerups = powerups
		self.highscores = highscores
		self.rng = rng or random.Random()
		self.countdown_ms = 0

	def random_position(self) -> tuple[float, float]:
		x = self.rng.uniform(PLAY_MARGIN, WIDTH - PLAY_MARGIN)
		y = self.rng.uniform(FIELD_TOP, HEIGHT - PLAY_MARGIN)
		return x, y

	def spawn_collectibles(self, level: int) -> List[Token]:
		colors = colors_for_level(level)
		speed = base_velocity(level)
		tokens: List[Token] = []
		for _ in range(token_count(level)):
			x, y = self.random_position()
			tokens.append(
				Collectible(
					x=x,
					y=y,
					vx=self.rng.uniform(-speed, speed),
					vy=self.rng.uniform(-speed, speed),
					color=self.rng.choice(colors),
				)
			)
		return tokens

	def spawn_powerups(self, level: int) -> List[Token]:
		tokens: List[Token] = []
		for _ in range(powerup_count(level)):
			x, y = self.random_position()
			tokens.append(
				PowerUpToken(
					x=x,
					y=y,
					vx=self.rng.uniform(-POWERUP_VELOCITY, POWERUP_VELOCITY),
					vy=self.rng.uniform(-POWERUP_VELOCITY, POWERUP_VELOCITY),
					kind=self.rng.choice(POWERUP_KINDS),
				)
			)
		return tokens

	def reset_level(self, state: RunState, level: Optional[int] = None) -> None:
		if level is not None:
			state.level = level
		required = required_points(state.level)
		# Expiries from the previous level must not touch the new claw or pool.
		self.powerups.clear(state)
		state.held.clear()
		state.collected.clear()
		state.score = 0
		state.time_left = LEVEL_TIME
		state.required_points = required
		state.claw = Claw()
		state.free = self.spawn_collectibles(state.level)
		state.free.extend(self.spawn_powerups(state.level))
		self.countdown_ms = 0
		logger.debug(
			"level_reset",
			level=state.level,
			tokens=len(state.free),
			required_points=required,
		)

	def reset_run(self, state: RunState) -> None:
		state.total_score = 0
		self.reset_level(state, 1)

	def tick_countdown(self, state: RunState, elapsed_ms: int) -> bool:
		"""Advance the level clock; True once the countdown has run out."""
		if state.time_left <= 0:
			return True
		self.countdown_ms += max(0, elapsed_ms)
		while self.countdown_ms >= COUNTDOWN_INTERVAL_MS and state.time_left > 0:
			self.countdown_ms -= COUNTDOWN_INTERVAL_MS
			state.time_left -= 1
		return state.time_left <= 0

	@staticmethod
	def goal_met(state: RunState) -> bool:
		return state.score >= state.required_points

	def clear_level(self, state: RunState) -> int:
		cleared = state.level
		banked = state.score
		state.total_score += banked
		self.reset_level(state, cleared + 1)
		logger.info(
			"level_cleared",
			level=cleared,
			banked=banked,
			total_score=state.total_score,
			next_required=state.required_points,
		)
		return state.level

	def game_over(self, state: RunState) -> GameOverResult:
		final = state.total_score + state.score
		new_high = self.highscores.submit(final)
		# The board stays frozen until restart, so no reversal may run.
		self.powerups.clear(state)
		logger.info(
			"game_over",
			level=state.level,
			level_score=state.score,
			final_score=final,
			new_high_score=new_high,
		)
		return GameOverResult(
			level=state.level,
			level_score=state.score,
			final_score=final,
			high_score=self.highscores.best,
			new_high_score=new_high,
		)
