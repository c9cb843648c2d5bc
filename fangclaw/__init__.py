"""Simulation core for Fang & Claw, a claw-machine arcade game."""

from .entities import Claw, Collectible, PowerUpToken, RunState, Token
from .events import GameSnapshot, Message, SoundCue
from .game import FangClawGame, GameState
from .highscore import HighScoreBook, JsonFileStore, MemoryStore
from .levels import required_points
from .powerups import POWERUP_TYPES

__all__ = [
	"Claw",
	"Collectible",
	"FangClawGame",
	"GameSnapshot",
	"GameState",
	"HighScoreBook",
	"JsonFileStore",
	"MemoryStore",
	"Message",
	"POWERUP_TYPES",
	"PowerUpToken",
	"RunState",
	"SoundCue",
	"Token",
	"required_points",
]
