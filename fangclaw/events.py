"""Records the core hands to its presentation and audio collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Literal, Optional, Tuple, Union

MessageCategory = Literal["success", "failure", "powerup"]
SoundName = Literal["grab", "drop", "collect", "level_up", "game_over"]


@dataclass(frozen=True)
class Message:
	text: str
	category: MessageCategory
	duration_ms: int


@dataclass(frozen=True)
class SoundCue:
	name: SoundName


GameEvent = Union[Message, SoundCue]


@dataclass(frozen=True)
class TokenView:
	x: float
	y: float
	size: float
	category: str
	selected: bool
	is_powerup: bool


@dataclass(frozen=True)
class ClawView:
	x: float
	y: float
	effective_x: float
	size: float
	is_open: bool
	angle: float


@dataclass(frozen=True)
class GameSnapshot:
	state: str
	level: int
	score: int
	total_score: int
	time_left: int
	required_points: int
	high_score: int
	goal_met: bool
	active_powerups: FrozenSet[str]
	message: Optional[Message]
	tutorial_text: Optional[str]
	transition_alpha: int
	story_page: int
	audio_enabled: bool
	claw: ClawView
	tokens: Tuple[TokenView, ...] = ()
	collected_counts: Dict[str, int] = field(default_factory=dict)

	@property
	def final_score(self) -> int:
		return self.total_score + self.score
