"""Best-score persistence behind a tiny get/set key-value interface."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import structlog

from .constants import HIGHSCORE_KEY

logger = structlog.get_logger()


class KeyValueStore(Protocol):
	def get(self, key: str) -> Optional[str]: ...

	def set(self, key: str, value: str) -> None: ...


class MemoryStore:
	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._data: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._data.get(key)

	def set(self, key: str, value: str) -> None:
		self._data[key] = value


class JsonFileStore:
	"""Keeps every key in one JSON object on disk.

	A missing, unreadable or corrupt file reads as empty; the next ``set``
	rewrites it whole through a temp file and ``os.replace``.
	"""

	def __init__(self, path: Union[str, Path]) -> None:
		self.path = Path(path)

	def _load(self) -> Dict[str, str]:
		try:
			raw = self.path.read_text(encoding="utf-8")
		except FileNotFoundError:
			return {}
		except OSError as exc:
			logger.warning("highscore_file_unreadable", path=str(self.path), error=str(exc))
			return {}
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as exc:
			logger.warning("highscore_file_corrupt", path=str(self.path), error=str(exc))
			return {}
		if not isinstance(data, dict):
			logger.warning("highscore_file_corrupt", path=str(self.path), error="not an object")
			return {}
		return {str(key): str(value) for key, value in data.items()}

	def get(self, key: str) -> Optional[str]:
		return self._load().get(key)

	def set(self, key: str, value: str) -> None:
		data = self._load()
		data[key] = value
		directory = self.path.parent
		directory.mkdir(parents=True, exist_ok=True)
		fd, tmp_name = tempfile.mkstemp(prefix=".highscore-", dir=directory)
		try:
			with os.fdopen(fd, "w", encoding="utf-8") as handle:
				json.dump(data, handle)
			os.replace(tmp_name, self.path)
		except BaseException:
			Path(tmp_name).unlink(missing_ok=True)
			raise


def parse_score(raw: Optional[str]) -> int:
	if raw is None:
		return 0
	try:
		value = int(raw.strip())
	except (AttributeError, ValueError):
		logger.warning("highscore_malformed", raw=raw)
		return 0
	if value < 0:
		logger.warning("highscore_malformed", raw=raw)
		return 0
	return value


class HighScoreBook:
	def __init__(self, store: KeyValueStore, key: str = HIGHSCORE_KEY) -> None:
		self.store = store
		self.key = key
		self.best = parse_score(store.get(key))

	def reload(self) -> int:
		self.best = parse_score(self.store.get(self.key))
		return self.best

	def submit(self, score: int) -> bool:
		"""Record ``score`` if it strictly beats the stored best."""
		if score <= self.best:
			return False
		previous = self.best
		self.best = int(score)
		self.store.set(self.key, str(self.best))
		logger.info("highscore_updated", previous=previous, best=self.best)
		return True
