"""Cancellable one-shot callbacks keyed to the simulation clock.

Power-up expiry and message hiding are deferred work. Each entry is stored
under a key; scheduling the same key again cancels whatever was pending for
it, so a level reset can drop stale reversals before they run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger()


@dataclass
class ScheduledTask:
	key: str
	fire_at_ms: float
	action: Callable[[], None]
	cancelled: bool = False

	def cancel(self) -> None:
		self.cancelled = True


class Scheduler:
	def __init__(self) -> None:
		self._pending: Dict[str, ScheduledTask] = {}

	def schedule(
		self,
		key: str,
		now_ms: float,
		delay_ms: float,
		action: Callable[[], None],
	) -> ScheduledTask:
		if delay_ms < 0:
			raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
		self.cancel(key)
		task = ScheduledTask(key=key, fire_at_ms=now_ms + delay_ms, action=action)
		self._pending[key] = task
		return task

	def cancel(self, key: str) -> bool:
		task = self._pending.pop(key, None)
		if task is None:
			return False
		task.cancel()
		return True

	def cancel_prefix(self, prefix: str) -> int:
		keys = [key for key in self._pending if key.startswith(prefix)]
		for key in keys:
			self.cancel(key)
		if keys:
			logger.debug("scheduler_cancelled", prefix=prefix, count=len(keys))
		return len(keys)

	def cancel_all(self) -> int:
		return self.cancel_prefix("")

	def deadline(self, key: str) -> Optional[float]:
		task = self._pending.get(key)
		return task.fire_at_ms if task else None

	def pending_keys(self) -> List[str]:
		return sorted(self._pending)

	def run_due(self, now_ms: float) -> int:
		"""Fire every task whose deadline has passed, earliest first.

		Actions may schedule or cancel other keys while this runs.
		"""
		due = sorted(
			(task for task in self._pending.values() if task.fire_at_ms <= now_ms),
			key=lambda task: task.fire_at_ms,
		)
		fired = 0
		for task in due:
			if task.cancelled or self._pending.get(task.key) is not task:
				continue
			del self._pending[task.key]
			task.action()
			fired += 1
		return fired
