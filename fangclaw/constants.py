"""Gameplay tunables for the claw simulation.

Distances are pixels, speeds are pixels per tick and durations are
milliseconds unless the name says otherwise.
"""

from __future__ import annotations

import math


WIDTH, HEIGHT = 720, 610
PLAY_MARGIN = 50
FIELD_TOP = 100
SCORING_BAND_Y = 100

TICK_SECONDS = 1.0 / 60.0
MAX_TICKS_PER_UPDATE = 5
COUNTDOWN_INTERVAL_MS = 1000
LEVEL_TIME = 60

# Claw
CLAW_SIZE = 240
CLAW_SPEED = 9
CLAW_HOME_Y = 50
DIAGONAL_FACTOR = 0.707
CHAIN_LENGTH = 150
GRAB_OFFSET_Y = 20
SWING_OFFSET = 10
SWING_DAMPING = 0.99
SWING_RESTORE = 0.01
SWING_INPUT_GAIN = 0.05
MAX_SWING_ANGLE = math.pi / 4

# Tokens
TOKEN_SIZE = 120
GRAVITY = 0.5
MAX_FALL_SPEED = 10.0
MAX_TOKEN_SPEED = 12.0
BOUNCE_RESTITUTION = 1.1
BOUNCE_JITTER = 0.5
TOKEN_FRICTION = 0.998
DROP_VY = 2.0
DROP_VX_SPREAD = 2.0

# Escape
ESCAPE_RANGE_FACTOR = 2.0
ESCAPE_SPEED = 3.0
ESCAPE_JITTER = 0.5

# Level population
BASE_TOKEN_COUNT = 25
TOKEN_COUNT_STEP = 3
MAX_TOKEN_REDUCTIONS = 5
BASE_REQUIRED_POINTS = 100
REQUIRED_POINTS_STEP = 50
BASE_VELOCITY = 0.5
VELOCITY_PER_LEVEL = 0.5

COLOR_VALUES = {
	"red": 10,
	"blue": 15,
	"yellow": 20,
	"green": 25,
	"purple": 30,
}
DEFAULT_COLOR_VALUE = 10
BASE_COLORS = ("red", "blue", "yellow")
GREEN_UNLOCK_LEVEL = 2
PURPLE_UNLOCK_LEVEL = 3

# Power-ups
POWERUP_KINDS = ("MAGNET", "DOUBLE_POINTS", "SLOW_TIME")
POWERUP_SIZE = 100
POWERUP_VALUE = 50
POWERUP_VELOCITY = 0.5
MAX_POWERUPS = 3
MAGNET_SIZE_FACTOR = 1.5
SLOW_TIME_FACTOR = 0.5
NORMAL_GRAB_LIMIT = 1
MAGNET_GRAB_LIMIT = 2

# Messages
SUCCESS_MESSAGE_MS = 1000
FAILURE_MESSAGE_MS = 2000
POWERUP_MESSAGE_MS = 2000

# Flow
STORY_PAGES = 6
TRANSITION_STEP = 5
TRANSITION_PEAK = 255
HIGHSCORE_KEY = "highscore"
