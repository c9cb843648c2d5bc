"""Fang & Claw: pygame front end for the claw simulation core."""

from __future__ import annotations

import random
from typing import Dict, Optional, Tuple

import numpy as np
import pygame
import structlog

from fangclaw.constants import HEIGHT, PLAY_MARGIN, SCORING_BAND_Y, WIDTH
from fangclaw.events import GameSnapshot, Message, SoundCue
from fangclaw.game import FangClawGame
from fangclaw.highscore import HighScoreBook, JsonFileStore
from fangclaw.powerups import POWERUP_TYPES
from fangclaw.settings import Settings, configure_logging

logger = structlog.get_logger()

FONT_LARGE_SIZE = 30
FONT_SMALL_SIZE = 16
BG_COLOR = (12, 10, 20)
STORY_BG_COLOR = (26, 27, 47)
BORDER_COLOR = (255, 107, 0)
TEXT_COLOR = (255, 107, 0)
PANEL_COLOR = (24, 20, 38)
SCORING_BAND_COLOR = (40, 28, 60)
GOAL_MET_COLOR = (46, 204, 113)
WARNING_COLOR = (255, 80, 80)
BAT_COLORS: Dict[str, Tuple[int, int, int]] = {
	"red": (220, 60, 60),
	"blue": (70, 120, 230),
	"yellow": (240, 210, 70),
	"green": (80, 200, 110),
	"purple": (160, 90, 200),
}
MESSAGE_COLORS: Dict[str, Tuple[int, int, int]] = {
	"success": (46, 204, 113),
	"failure": (255, 107, 0),
	"powerup": (155, 89, 182),
}
STORY_LINES = (
	"Count Dracula's bats have slipped out of the castle.",
	"They flutter through the crypt, faster every night.",
	"Only the old claw machine can catch them now.",
	"Grab a bat and haul it up to the rafters to bank it.",
	"Bats wriggle free if you are too slow or too low.",
	"Bring them home before the candle burns out.",
)
TIMER_WARNING = 10
BAT_DRAW_SCALE = 0.35

SOUND_TONES: Dict[str, Tuple[float, float]] = {
	"grab": (660.0, 0.08),
	"drop": (220.0, 0.15),
	"collect": (880.0, 0.12),
	"level_up": (1320.0, 0.35),
	"game_over": (110.0, 0.6),
}
SAMPLE_RATE = 22050
SOUND_VOLUME = 0.4


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
	value = value.lstrip("#")
	return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def tone(frequency: float, seconds: float) -> np.ndarray:
	samples = np.arange(int(SAMPLE_RATE * seconds))
	envelope = np.linspace(1.0, 0.0, samples.size)
	wave = np.sin(2 * np.pi * frequency * samples / SAMPLE_RATE) * envelope
	return (wave * 32767 * SOUND_VOLUME).astype(np.int16)


class SilentAudio:
	def play(self, cue: SoundCue) -> None:
		return None


class MixerAudio:
	"""Synthesised beeps for each sound cue."""

	def __init__(self) -> None:
		pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
		channels = pygame.mixer.get_init()[2]
		self.sounds: Dict[str, pygame.mixer.Sound] = {}
		for name, (frequency, seconds) in SOUND_TONES.items():
			samples = tone(frequency, seconds)
			if channels > 1:
				samples = np.repeat(samples[:, None], channels, axis=1)
			self.sounds[name] = pygame.sndarray.make_sound(np.ascontiguousarray(samples))

	def play(self, cue: SoundCue) -> None:
		sound = self.sounds.get(cue.name)
		if sound is None:
			return
		try:
			sound.stop()
			sound.play()
		except pygame.error as exc:
			logger.warning("sound_playback_failed", cue=cue.name, error=str(exc))


def create_audio() -> SilentAudio | MixerAudio:
	try:
		return MixerAudio()
	except (pygame.error, ValueError) as exc:
		logger.warning("audio_unavailable", error=str(exc))
		return SilentAudio()


class ClawGameWindow:
	def __init__(self, settings: Optional[Settings] = None) -> None:
		self.settings = settings or Settings()
		pygame.init()
		pygame.display.set_caption("Fang & Claw")
		self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
		self.clock = pygame.time.Clock()
		self.font_large = pygame.font.SysFont("consolas", FONT_LARGE_SIZE)
		self.font_small = pygame.font.SysFont("consolas", FONT_SMALL_SIZE)
		self.audio = create_audio()
		rng = random.Random(self.settings.seed)
		self.game = FangClawGame(
			highscores=HighScoreBook(JsonFileStore(self.settings.highscore_path)),
			rng=rng,
			start_level=self.settings.start_level,
			story_pages=self.settings.story_pages,
		)

	def handle_event(self, event: pygame.event.Event) -> bool:
		if event.type == pygame.QUIT:
			return False
		if event.type == pygame.KEYDOWN:
			if event.key == pygame.K_ESCAPE:
				return False
			if event.key == pygame.K_SPACE:
				self.game.press_primary()
		elif event.type == pygame.MOUSEBUTTONDOWN:
			self.game.activate_audio()
		return True

	def poll_directions(self) -> None:
		keys = pygame.key.get_pressed()
		self.game.set_direction(
			left=keys[pygame.K_LEFT],
			right=keys[pygame.K_RIGHT],
			up=keys[pygame.K_UP],
			down=keys[pygame.K_DOWN],
		)

	def play_events(self) -> None:
		for event in self.game.drain_events():
			if isinstance(event, SoundCue):
				self.audio.play(event)

	def update(self, dt: float) -> None:
		self.game.update(dt)
		self.play_events()

	def render(self) -> GameSnapshot:
		snap = self.game.snapshot()
		if snap.state == "title":
			self.draw_title(snap)
		elif snap.state == "story":
			self.draw_story(snap)
		elif snap.state == "transition":
			self.draw_transition(snap)
		elif snap.state == "game_over":
			self.draw_game_over(snap)
		else:
			self.draw_play(snap)
		return snap

	def blit_centered(self, text: str, font: pygame.font.Font, y: int, color=TEXT_COLOR) -> None:
		label = font.render(text, True, color)
		self.screen.blit(label, label.get_rect(center=(WIDTH // 2, y)))

	def draw_title(self, snap: GameSnapshot) -> None:
		self.screen.fill(BG_COLOR)
		self.blit_centered("FANG & CLAW", self.font_large, HEIGHT // 2 - 40)
		self.blit_centered("Press SPACE to begin", self.font_small, HEIGHT // 2 + 10)
		self.blit_centered(f"High Score: {snap.high_score}", self.font_small, HEIGHT // 2 + 40)

	def draw_story(self, snap: GameSnapshot) -> None:
		self.screen.fill(STORY_BG_COLOR)
		rect = pygame.Rect(40, HEIGHT // 2 - 80, WIDTH - 80, 160)
		pygame.draw.rect(self.screen, BORDER_COLOR, rect, width=4, border_radius=5)
		line = STORY_LINES[snap.story_page % len(STORY_LINES)]
		self.blit_centered(line, self.font_small, rect.centery - 10, (230, 230, 240))
		self.blit_centered("SPACE", self.font_small, rect.bottom - 24)

	def draw_play(self, snap: GameSnapshot) -> None:
		self.screen.fill(BG_COLOR)
		band = pygame.Rect(10, 10, WIDTH - 20, SCORING_BAND_Y)
		pygame.draw.rect(self.screen, SCORING_BAND_COLOR, band)
		pygame.draw.rect(self.screen, BORDER_COLOR, pygame.Rect(10, 10, WIDTH - 20, HEIGHT - 20), 4)
		self.draw_tokens(snap)
		self.draw_claw(snap)
		self.draw_panel(snap)
		self.draw_message(snap.message)
		if snap.tutorial_text:
			self.draw_tutorial(snap.tutorial_text)

	def draw_tokens(self, snap: GameSnapshot) -> None:
		for token in snap.tokens:
			radius = max(6, int(token.size * BAT_DRAW_SCALE / 2))
			if token.selected:
				radius = int(radius * 1.2)
			center = (int(token.x), int(token.y))
			if token.is_powerup:
				color = hex_to_rgb(POWERUP_TYPES[token.category].color)
				pygame.draw.circle(self.screen, color, center, radius)
				pygame.draw.line(self.screen, (255, 255, 255), (center[0] - radius, center[1]), (center[0] + radius, center[1]), 2)
				pygame.draw.line(self.screen, (255, 255, 255), (center[0], center[1] - radius), (center[0], center[1] + radius), 2)
			else:
				color = BAT_COLORS.get(token.category, BAT_COLORS["red"])
				wing = (
					(center[0] - radius * 2, center[1] - radius // 2),
					(center[0], center[1] + radius // 2),
					(center[0] + radius * 2, center[1] - radius // 2),
				)
				pygame.draw.polygon(self.screen, color, wing)
				pygame.draw.circle(self.screen, color, center, radius)

	def draw_claw(self, snap: GameSnapshot) -> None:
		claw = snap.claw
		actual_x = int(claw.effective_x)
		y = int(claw.y)
		pygame.draw.line(self.screen, BORDER_COLOR, (int(claw.x), 0), (actual_x, y), 9)
		if claw.is_open:
			pygame.draw.line(self.screen, BORDER_COLOR, (actual_x - 50, y), (actual_x - 25, y + 60), 9)
			pygame.draw.line(self.screen, BORDER_COLOR, (actual_x + 50, y), (actual_x + 25, y + 60), 9)
		else:
			pygame.draw.line(self.screen, BORDER_COLOR, (actual_x - 35, y), (actual_x, y + 60), 9)
			pygame.draw.line(self.screen, BORDER_COLOR, (actual_x + 35, y), (actual_x, y + 60), 9)

	def draw_panel(self, snap: GameSnapshot) -> None:
		rect = pygame.Rect(PLAY_MARGIN - 30, HEIGHT - 44, WIDTH - 2 * (PLAY_MARGIN - 30), 30)
		pygame.draw.rect(self.screen, PANEL_COLOR, rect, border_radius=8)
		time_color = WARNING_COLOR if snap.time_left <= TIMER_WARNING else TEXT_COLOR
		goal_color = GOAL_MET_COLOR if snap.goal_met else TEXT_COLOR
		parts = (
			(f"Score {snap.score}", TEXT_COLOR),
			(f"Goal {snap.required_points}", goal_color),
			(f"Level {snap.level}", TEXT_COLOR),
			(f"{snap.time_left:02d}s", time_color),
		)
		x = rect.x + 14
		for text, color in parts:
			label = self.font_small.render(text, True, color)
			self.screen.blit(label, (x, rect.y + 6))
			x += label.get_width() + 28
		for kind in sorted(snap.active_powerups):
			spec = POWERUP_TYPES[kind]
			label = self.font_small.render(spec.description, True, hex_to_rgb(spec.color))
			self.screen.blit(label, (x, rect.y + 6))
			x += label.get_width() + 16

	def draw_message(self, message: Optional[Message]) -> None:
		if message is None:
			return
		lines = message.text.split("\n")
		color = MESSAGE_COLORS.get(message.category, TEXT_COLOR)
		for index, line in enumerate(lines):
			self.blit_centered(line, self.font_large, HEIGHT // 2 - 20 + index * 36, color)

	def draw_tutorial(self, text: str) -> None:
		overlay = pygame.Surface((WIDTH, 60), pygame.SRCALPHA)
		overlay.fill((0, 0, 0, 200))
		self.screen.blit(overlay, (0, HEIGHT - 110))
		self.blit_centered(text, self.font_small, HEIGHT - 80)

	def draw_transition(self, snap: GameSnapshot) -> None:
		self.screen.fill((0, 0, 0))
		if snap.transition_alpha > 0:
			label = self.font_large.render(f"Level {snap.level}", True, TEXT_COLOR)
			label.set_alpha(snap.transition_alpha)
			self.screen.blit(label, label.get_rect(center=(WIDTH // 2, HEIGHT // 2)))

	def draw_game_over(self, snap: GameSnapshot) -> None:
		self.screen.fill((0, 0, 0))
		result = self.game.last_game_over
		final = result.final_score if result else snap.final_score
		self.blit_centered("GAME OVER", self.font_large, HEIGHT // 2 - 60)
		self.blit_centered(f"Level {snap.level} Score: {snap.score}", self.font_small, HEIGHT // 2 - 20)
		self.blit_centered(f"Total Score: {final}", self.font_small, HEIGHT // 2 + 10)
		self.blit_centered(f"High Score: {snap.high_score}", self.font_small, HEIGHT // 2 + 40)
		if result and result.new_high_score:
			self.blit_centered("NEW HIGH SCORE!", self.font_small, HEIGHT // 2 + 70, GOAL_MET_COLOR)
		self.blit_centered("Press SPACE to restart", self.font_small, HEIGHT // 2 + 100)

	def run(self) -> None:
		running = True
		while running:
			dt = self.clock.tick(self.settings.fps) / 1000.0
			for event in pygame.event.get():
				if not self.handle_event(event):
					running = False
			self.poll_directions()
			self.update(dt)
			self.render()
			pygame.display.flip()
		pygame.quit()


def main() -> None:
	settings = Settings()
	configure_logging(settings.log_level)
	ClawGameWindow(settings).run()


if __name__ == "__main__":
	main()
