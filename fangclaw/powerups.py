"""Timed power-ups: magnetic claw, double points and slow motion.

Each kind applies a one-shot effect when it switches on and reverses it when
its timer runs out. Picking up a kind that is already running only restarts
the timer, so the claw never grows twice.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional

import structlog

from .constants import (
	CLAW_SIZE,
	MAGNET_SIZE_FACTOR,
	NORMAL_GRAB_LIMIT,
	POWERUP_MESSAGE_MS,
	SLOW_TIME_FACTOR,
)
from .entities import RunState
from .events import Message
from .scheduler import Scheduler

logger = structlog.get_logger()

EXPIRY_PREFIX = "powerup:"

Effect = Callable[[RunState, random.Random], None]


def _grow_claw(state: RunState, rng: random.Random) -> None:
	state.claw.size *= MAGNET_SIZE_FACTOR


def _reset_claw(state: RunState, rng: random.Random) -> None:
	state.claw.size = CLAW_SIZE
	# Without the magnet the claw holds one bat; the rest fall.
	for token in state.held[NORMAL_GRAB_LIMIT:]:
		state.drop_to_pool(token, rng)


def _slow_tokens(state: RunState, rng: random.Random) -> None:
	for token in state.free:
		token.vx *= SLOW_TIME_FACTOR
		token.vy *= SLOW_TIME_FACTOR


def _restore_tokens(state: RunState, rng: random.Random) -> None:
	"""Speed up every bat free at expiry, including ones dropped after activation."""
	for token in state.free:
		token.vx /= SLOW_TIME_FACTOR
		token.vy /= SLOW_TIME_FACTOR


def _no_effect(state: RunState, rng: random.Random) -> None:
	return None


@dataclass(frozen=True)
class PowerUpSpec:
	kind: str
	color: str
	duration_ms: int
	description: str
	activate: Effect = _no_effect
	deactivate: Effect = _no_effect

	@property
	def duration_seconds(self) -> int:
		return self.duration_ms // 1000


POWERUP_TYPES: Dict[str, PowerUpSpec] = {
	"MAGNET": PowerUpSpec(
		kind="MAGNET",
		color="#9b59b6",
		duration_ms=15000,
		description="Magnetic Claw",
		activate=_grow_claw,
		deactivate=_reset_claw,
	),
	"DOUBLE_POINTS": PowerUpSpec(
		kind="DOUBLE_POINTS",
		color="#ff6b00",
		duration_ms=20000,
		description="2x Points",
	),
	"SLOW_TIME": PowerUpSpec(
		kind="SLOW_TIME",
		color="#2ecc71",
		duration_ms=15000,
		description="Slow Motion",
		activate=_slow_tokens,
		deactivate=_restore_tokens,
	),
}


def powerup_count(level: int) -> int:
	return min(level // 2, 3)


class PowerUpManager:
	def __init__(
		self,
		scheduler: Scheduler,
		on_message: Optional[Callable[[Message], None]] = None,
		rng: Optional[random.Random] = None,
	) -> None:
		self.scheduler = scheduler
		self.on_message = on_message
		self.rng = rng or random.Random()

	@staticmethod
	def spec(kind: str) -> PowerUpSpec:
		return POWERUP_TYPES[kind]

	def activate(self, state: RunState, kind: str, now_ms: int) -> Message:
		spec = self.spec(kind)
		if not state.active_powerups.get(kind, False):
			state.active_powerups[kind] = True
			spec.activate(state, self.rng)
			logger.info("powerup_activated", kind=kind, duration_ms=spec.duration_ms)
		else:
			logger.info("powerup_restarted", kind=kind, duration_ms=spec.duration_ms)
		self.scheduler.schedule(
			EXPIRY_PREFIX + kind,
			now_ms,
			spec.duration_ms,
			lambda: self.deactivate(state, kind),
		)
		return Message(
			text=f"{spec.description} ACTIVATED!\n({spec.duration_seconds}s)",
			category="powerup",
			duration_ms=POWERUP_MESSAGE_MS,
		)

	def deactivate(self, state: RunState, kind: str) -> None:
		spec = self.spec(kind)
		self.scheduler.cancel(EXPIRY_PREFIX + kind)
		if not state.active_powerups.get(kind, False):
			return
		state.active_powerups[kind] = False
		spec.deactivate(state, self.rng)
		logger.info("powerup_expired", kind=kind)
		if self.on_message is not None:
			self.on_message(
				Message(
					text=f"{spec.description} EXPIRED",
					category="powerup",
					duration_ms=POWERUP_MESSAGE_MS,
				)
			)

	def clear(self, state: RunState) -> None:
		"""Drop pending expiries and flags without running any reversal."""
		self.scheduler.cancel_prefix(EXPIRY_PREFIX)
		for kind in state.active_powerups:
			state.active_powerups[kind] = False

	def expiry_deadline(self, kind: str) -> Optional[float]:
		return self.scheduler.deadline(EXPIRY_PREFIX + kind)

	@staticmethod
	def active_kinds(state: RunState) -> FrozenSet[str]:
		return frozenset(kind for kind, on in state.active_powerups.items() if on)
