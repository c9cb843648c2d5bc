"""Grab and release resolution for the claw.

Closing the claw picks bats out of the free pool; opening it near the top
banks them, subject to a drop roll per held bat. Tokens are moved between
the pool lists rather than copied, so a bat is only ever in one of them.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
	CHAIN_LENGTH,
	FAILURE_MESSAGE_MS,
	MAGNET_GRAB_LIMIT,
	NORMAL_GRAB_LIMIT,
	SCORING_BAND_Y,
	SUCCESS_MESSAGE_MS,
)
from .entities import Claw, Collectible, PowerUpToken, RunState, Token
from .events import GameEvent, Message, SoundCue
from .powerups import PowerUpManager


@dataclass
class ReleaseResult:
	collected: List[Token] = field(default_factory=list)
	dropped: List[Token] = field(default_factory=list)
	points: int = 0
	events: List[GameEvent] = field(default_factory=list)
	pool_empty: bool = False


def in_scoring_band(claw: Claw) -> bool:
	return claw.y <= SCORING_BAND_Y


class InteractionResolver:
	def __init__(
		self,
		powerups: PowerUpManager,
		rng: Optional[random.Random] = None,
	) -> None:
		self.powerups = powerups
		self.rng = rng or random.Random()

	def grab_limit(self, state: RunState) -> int:
		return MAGNET_GRAB_LIMIT if state.powerup_active("MAGNET") else NORMAL_GRAB_LIMIT

	def can_grab(self, token: Token, claw: Claw) -> bool:
		gx, gy = claw.grab_point()
		return not token.selected and math.hypot(token.x - gx, token.y - gy) < claw.size

	def grab(self, state: RunState) -> List[Token]:
		"""Attach the first reachable bats, in pool order, up to the grab limit."""
		limit = self.grab_limit(state) - len(state.held)
		grabbed: List[Token] = []
		if limit <= 0:
			return grabbed
		for token in list(state.free):
			if len(grabbed) >= limit:
				break
			if not self.can_grab(token, state.claw):
				continue
			state.free.remove(token)
			token.selected = True
			token.x = state.claw.effective_x
			token.y = state.claw.y + CHAIN_LENGTH
			token.vx = 0.0
			token.vy = 0.0
			state.held.append(token)
			grabbed.append(token)
		return grabbed

	def release(self, state: RunState, now_ms: int) -> ReleaseResult:
		result = ReleaseResult()
		near_top = in_scoring_band(state.claw)
		to_process = list(state.held)
		state.held.clear()
		for token in to_process:
			if not near_top or self.rng.random() < state.tier.drop_chance:
				self.drop(state, token, result, near_top)
			else:
				self.collect(state, token, result, now_ms)
		result.pool_empty = not state.free
		return result

	def drop(self, state: RunState, token: Token, result: ReleaseResult, near_top: bool) -> None:
		state.drop_to_pool(token, self.rng)
		result.dropped.append(token)
		result.events.append(SoundCue("drop"))
		text = "LOST" if near_top else "TOO LOW!"
		result.events.append(Message(text=text, category="failure", duration_ms=FAILURE_MESSAGE_MS))

	def collect(self, state: RunState, token: Token, result: ReleaseResult, now_ms: int) -> None:
		token.selected = False
		result.collected.append(token)
		result.events.append(SoundCue("collect"))
		if isinstance(token, PowerUpToken):
			result.events.append(self.powerups.activate(state, token.kind, now_ms))
			return
		multiplier = 2 if state.powerup_active("DOUBLE_POINTS") else 1
		gained = token.value * multiplier
		state.score += gained
		result.points += gained
		if isinstance(token, Collectible):
			state.collected.append(token)
		result.events.append(
			Message(text=f"+{gained}", category="success", duration_ms=SUCCESS_MESSAGE_MS)
		)
