"""Runtime settings, overridable through ``FANGCLAW_*`` environment variables.

Example: ``FANGCLAW_START_LEVEL=4`` drops straight into level four.
"""

from __future__ import annotations

import logging
from typing import Optional

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import STORY_PAGES


class Settings(BaseSettings):
	fps: int = 60
	headless_fps: int = 30
	start_level: int = 1
	highscore_path: str = "fangclaw_highscore.json"
	seed: Optional[int] = None
	log_level: str = "info"
	story_pages: int = STORY_PAGES

	model_config = SettingsConfigDict(
		env_prefix="FANGCLAW_",
		env_file=".env",
		env_file_encoding="utf-8",
		extra="ignore",
	)

	@field_validator("fps", "headless_fps", "start_level")
	@classmethod
	def _positive(cls, value: int) -> int:
		if value < 1:
			raise ValueError("must be at least 1")
		return value

	@field_validator("story_pages")
	@classmethod
	def _non_negative(cls, value: int) -> int:
		if value < 0:
			raise ValueError("must not be negative")
		return value


def configure_logging(level: str = "info") -> None:
	numeric = logging.getLevelName(level.upper())
	if not isinstance(numeric, int):
		numeric = logging.INFO
	structlog.configure(
		processors=[
			structlog.processors.add_log_level,
			structlog.processors.TimeStamper(fmt="iso"),
			structlog.dev.ConsoleRenderer(),
		],
		wrapper_class=structlog.make_filtering_bound_logger(numeric),
		context_class=dict,
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=False,
	)
