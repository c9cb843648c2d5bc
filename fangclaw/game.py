"""Top-level game flow for Fang & Claw.

The game moves between title, story, play, level transition and game over.
Only PLAYING runs the simulation. A tick there always goes physics, then the
queued claw toggles, then the scheduled callbacks, then the countdown and
level evaluation. Pygame and gradio front ends drive it through
:meth:`FangClawGame.update` and read it back through :meth:`snapshot` and
:meth:`drain_events`.
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import List, Optional

import structlog

from .constants import (
	MAX_TICKS_PER_UPDATE,
	STORY_PAGES,
	TICK_SECONDS,
	TRANSITION_PEAK,
	TRANSITION_STEP,
)
from .entities import Collectible, RunState
from .events import ClawView, GameEvent, GameSnapshot, Message, SoundCue, TokenView
from .highscore import HighScoreBook, MemoryStore
from .interactions import InteractionResolver
from .levels import GameOverResult, LevelController
from .physics import ClawInput, PhysicsIntegrator
from .powerups import PowerUpManager
from .scheduler import Scheduler

logger = structlog.get_logger()

MESSAGE_KEY = "message"

TUTORIAL_STEPS = (
	("Use LEFT/RIGHT arrows to move the claw left and right", "horizontal"),
	("Use UP/DOWN arrows to move up and down", "vertical"),
	("Press SPACE to grab bats", "claw_close"),
	("Bring bats to the top to collect them", "collection"),
)


class GameState(Enum):
	TITLE = "title"
	STORY = "story"
	PLAYING = "playing"
	TRANSITION = "transition"
	GAME_OVER = "game_over"


class FangClawGame:
	def __init__(
		self,
		highscores: Optional[HighScoreBook] = None,
		rng: Optional[random.Random] = None,
		start_level: int = 1,
		story_pages: int = STORY_PAGES,
	) -> None:
		self.rng = rng or random.Random()
		self.scheduler = Scheduler()
		self.highscores = highscores or HighScoreBook(MemoryStore())
		self.powerups = PowerUpManager(self.scheduler, on_message=self.show_message, rng=self.rng)
		self.physics = PhysicsIntegrator(rng=self.rng)
		self.interactions = InteractionResolver(self.powerups, rng=self.rng)
		self.levels = LevelController(self.powerups, self.highscores, rng=self.rng)

		self.state = RunState()
		self.mode = GameState.TITLE
		self.story_pages = story_pages
		self.story_page = 0
		self.controls = ClawInput()
		self.pending_toggles = 0
		self.ticks = 0
		self.clock_ms = 0
		self._accumulator = 0.0
		self.tutorial_active = True
		self.tutorial_step = 0
		self.transition_alpha = 0
		self.transition_direction = 1
		self.audio_enabled = False
		self.message: Optional[Message] = None
		self.events: List[GameEvent] = []
		self.last_game_over: Optional[GameOverResult] = None
		self.levels.reset_level(self.state, start_level)

	# Inputs

	def set_direction(
		self,
		left: bool = False,
		right: bool = False,
		up: bool = False,
		down: bool = False,
	) -> None:
		self.controls = ClawInput(left=left, right=right, up=up, down=down)

	def press_primary(self) -> None:
		"""Space bar: advance dialogue, toggle the claw or restart."""
		if self.mode is GameState.TITLE:
			self.mode = GameState.STORY
			self.story_page = 0
			if self.story_pages <= 0:
				self.start_play()
		elif self.mode is GameState.STORY:
			self.story_page += 1
			if self.story_page >= self.story_pages:
				self.start_play()
		elif self.mode is GameState.PLAYING:
			self.pending_toggles += 1
		elif self.mode is GameState.GAME_OVER:
			self.restart()

	def activate_audio(self) -> None:
		if not self.audio_enabled:
			self.audio_enabled = True
			logger.info("audio_enabled")

	# Flow

	def start_play(self) -> None:
		self.mode = GameState.PLAYING
		self.activate_audio()
		self.pending_toggles = 0
		self.levels.reset_level(self.state)
		logger.info("play_started", level=self.state.level)

	def restart(self) -> None:
		self.scheduler.cancel_all()
		self.message = None
		self.pending_toggles = 0
		self.story_page = 0
		self.transition_alpha = 0
		self.transition_direction = 1
		self.last_game_over = None
		self.levels.reset_run(self.state)
		self.mode = GameState.TITLE
		logger.info("run_restarted")

	def complete_level(self) -> None:
		self.levels.clear_level(self.state)
		self.pending_toggles = 0
		self.emit(SoundCue("level_up"))
		self.mode = GameState.TRANSITION
		self.transition_alpha = 0
		self.transition_direction = 1

	def end_game(self) -> None:
		self.last_game_over = self.levels.game_over(self.state)
		self.pending_toggles = 0
		self.emit(SoundCue("game_over"))
		self.mode = GameState.GAME_OVER

	def evaluate_level(self) -> None:
		if self.levels.goal_met(self.state):
			self.complete_level()
		else:
			self.end_game()

	# Events

	def emit(self, event: GameEvent) -> None:
		if isinstance(event, Message):
			self.show_message(event)
		elif self.audio_enabled:
			self.events.append(event)

	def show_message(self, message: Message) -> None:
		self.message = message
		self.events.append(message)
		self.scheduler.schedule(MESSAGE_KEY, self.clock_ms, message.duration_ms, self.hide_message)

	def hide_message(self) -> None:
		self.message = None

	def drain_events(self) -> List[GameEvent]:
		events, self.events = self.events, []
		return events

	# Ticking

	def update(self, dt: float) -> int:
		"""Feed elapsed seconds; returns the number of fixed ticks run."""
		if not math.isfinite(dt) or dt < 0:
			dt = 0.0
		self._accumulator += dt
		ran = 0
		while self._accumulator >= TICK_SECONDS and ran < MAX_TICKS_PER_UPDATE:
			self._accumulator -= TICK_SECONDS
			self.step()
			ran += 1
		if ran == MAX_TICKS_PER_UPDATE:
			self._accumulator = min(self._accumulator, TICK_SECONDS)
		return ran

	def step(self) -> None:
		self.ticks += 1
		previous = self.clock_ms
		self.clock_ms = round(self.ticks * TICK_SECONDS * 1000)
		elapsed = self.clock_ms - previous
		if self.mode is GameState.PLAYING:
			self._play_tick(elapsed)
		else:
			if self.mode is GameState.TRANSITION:
				self._transition_tick()
			self.scheduler.run_due(self.clock_ms)

	def _play_tick(self, elapsed_ms: int) -> None:
		state = self.state
		self.physics.step(state, self.controls)
		if self.controls.horizontal:
			self.advance_tutorial("horizontal")
		if self.controls.vertical:
			self.advance_tutorial("vertical")

		toggles, self.pending_toggles = self.pending_toggles, 0
		for _ in range(toggles):
			self.toggle_claw()
			if self.mode is not GameState.PLAYING:
				return

		self.scheduler.run_due(self.clock_ms)
		if self.levels.tick_countdown(state, elapsed_ms):
			self.evaluate_level()

	def _transition_tick(self) -> None:
		self.transition_alpha += self.transition_direction * TRANSITION_STEP
		if self.transition_alpha > TRANSITION_PEAK:
			self.transition_direction = -1
		elif self.transition_alpha < 0:
			self.transition_alpha = 0
			self.transition_direction = 1
			self.levels.countdown_ms = 0
			self.mode = GameState.PLAYING

	def toggle_claw(self) -> None:
		state = self.state
		claw = state.claw
		if claw.is_open:
			claw.is_open = False
			self.advance_tutorial("claw_close")
			for _ in self.interactions.grab(state):
				self.emit(SoundCue("grab"))
			return

		claw.is_open = True
		result = self.interactions.release(state, self.clock_ms)
		for event in result.events:
			self.emit(event)
		if any(isinstance(token, Collectible) for token in result.collected):
			self.advance_tutorial("collection")
		if result.pool_empty:
			self.complete_level()

	def advance_tutorial(self, trigger: str) -> None:
		if not self.tutorial_active:
			return
		if TUTORIAL_STEPS[self.tutorial_step][1] != trigger:
			return
		self.tutorial_step += 1
		if self.tutorial_step >= len(TUTORIAL_STEPS):
			self.tutorial_active = False
			logger.info("tutorial_finished")

	# Output

	@property
	def tutorial_text(self) -> Optional[str]:
		if not self.tutorial_active or self.mode is not GameState.PLAYING:
			return None
		return TUTORIAL_STEPS[self.tutorial_step][0]

	def snapshot(self) -> GameSnapshot:
		state = self.state
		claw = state.claw
		return GameSnapshot(
			state=self.mode.value,
			level=state.level,
			score=state.score,
			total_score=state.total_score,
			time_left=state.time_left,
			required_points=state.required_points,
			high_score=self.highscores.best,
			goal_met=self.levels.goal_met(state),
			active_powerups=self.powerups.active_kinds(state),
			message=self.message,
			tutorial_text=self.tutorial_text,
			transition_alpha=max(0, min(TRANSITION_PEAK, self.transition_alpha)),
			story_page=self.story_page,
			audio_enabled=self.audio_enabled,
			claw=ClawView(
				x=claw.x,
				y=claw.y,
				effective_x=claw.effective_x,
				size=claw.size,
				is_open=claw.is_open,
				angle=claw.angle,
			),
			tokens=tuple(
				TokenView(
					x=token.x,
					y=token.y,
					size=token.size,
					category=token.category,
					selected=token.selected,
					is_powerup=token.is_powerup,
				)
				for token in [*state.free, *state.held]
			),
			collected_counts=state.collected_counts(),
		)
