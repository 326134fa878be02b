#!/usr/bin/env python3
"""
Suggestion rounds and rename rounds over the file registry.

A suggestion round fans out one request per record on a thread pool. Each
task builds its own engine from the factory, drains the streamed reply and
keeps only the last value. Results are applied on the calling thread as
they complete. A rename round walks the registry in order and renames one
file at a time, recording failures per record.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from pathlib import Path
import threading
from typing import Protocol

# local repo modules
from .llm_parsers import PartialSuggestion
from .llm_utils import normalize_suggested_name
from .registry import (
	ERROR_PREFIX,
	STATUS_PENDING,
	STATUS_RENAME_FAILED,
	STATUS_RENAMED,
	STATUS_SUGGESTED,
	STATUS_SUGGESTION_FAILED,
	FileRecord,
	FileRegistry,
)
from .renamer import move_or_rename

logger = logging.getLogger(__name__)

NO_NAME_ERROR = "Could not generate a name."

#============================================


class SuggestionRoundBusyError(RuntimeError):
	"""
	Raised when a round is requested while another is in flight.
	"""


class NameOracle(Protocol):
	def suggest_stream(self, current_name: str, content: str) -> Iterable[PartialSuggestion]:
		...


#============================================


@dataclass(slots=True, frozen=True)
class SuggestionOutcome:
	"""
	Result of one suggestion task: a name or an error message, never both.
	"""
	new_name: str | None = None
	error: str | None = None

	#============================================
	@classmethod
	def success(cls, new_name: str) -> SuggestionOutcome:
		return cls(new_name=new_name)

	#============================================
	@classmethod
	def failure(cls, message: str) -> SuggestionOutcome:
		return cls(error=message)

	#============================================
	@property
	def ok(self) -> bool:
		return self.error is None and bool(self.new_name)

	#============================================
	def as_marker(self) -> str:
		"""
		Value stored in FileRecord.suggested_name.
		"""
		if self.ok:
			return self.new_name
		return f"{ERROR_PREFIX} {self.error or NO_NAME_ERROR}"


#============================================


def _describe(exc: BaseException) -> str:
	return str(exc) or exc.__class__.__name__


def _reset_pending(record: FileRecord) -> None:
	record.status = STATUS_PENDING
	record.error = ""


#============================================


class SuggestionOrchestrator:
	"""
	Runs suggestion rounds and rename rounds against a FileRegistry.

	Args:
		registry: Records to work on.
		engine_factory: Zero-argument callable returning a fresh oracle.
			Called once inside every suggestion task.
		base_dir: Directory holding the files.
		max_workers: Thread pool size; defaults to one thread per record.
	"""

	def __init__(
		self,
		registry: FileRegistry,
		engine_factory: Callable[[], NameOracle],
		base_dir: Path,
		max_workers: int | None = None,
	) -> None:
		self.registry = registry
		self.engine_factory = engine_factory
		self.base_dir = base_dir
		self.max_workers = max_workers
		self._round_lock = threading.Lock()

	#============================================
	@property
	def is_busy(self) -> bool:
		return self._round_lock.locked()

	#============================================
	def _begin_round(self, kind: str) -> None:
		if not self._round_lock.acquire(blocking=False):
			raise SuggestionRoundBusyError(f"Cannot start {kind} round: a round is already in flight.")

	#============================================
	def _resolve(self, records: Iterable[FileRecord] | None) -> list[FileRecord]:
		if records is None:
			return self.registry.list_all()
		resolved: list[FileRecord] = []
		seen: set[str] = set()
		for record in records:
			if record.id in seen:
				continue
			seen.add(record.id)
			resolved.append(self.registry.get(record.id))
		return resolved

	#============================================
	def run_suggestion_round(
		self,
		records: Iterable[FileRecord] | None = None,
		on_update: Callable[[FileRecord], None] | None = None,
	) -> list[FileRecord]:
		"""
		Suggest a new name for every record, concurrently.

		Returns only after every task has finished.

		Args:
			records: Records to process; defaults to the whole registry.
			on_update: Called with each record right after its result is applied.

		Returns:
			Records in completion order.

		Raises:
			SuggestionRoundBusyError: Another round is in flight.
		"""
		self._begin_round("suggestion")
		try:
			batch = self._resolve(records)
			if not batch:
				return []
			for record in batch:
				self.registry.update(record.id, _reset_pending)
			workers = self.max_workers or len(batch)
			logger.info(f"Suggestion round: {len(batch)} files, {workers} workers")
			updated: list[FileRecord] = []
			with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="suggest") as pool:
				futures: dict[Future, str] = {}
				for record in batch:
					future = pool.submit(self._suggest_one, record.original_name, record.content)
					futures[future] = record.id
				for future in as_completed(futures):
					outcome = future.result()
					record = self.registry.update(
						futures[future],
						lambda rec, result=outcome: self._apply_outcome(rec, result),
					)
					updated.append(record)
					if on_update:
						on_update(record)
			return updated
		finally:
			self._round_lock.release()

	#============================================
	def _suggest_one(self, current_name: str, content: str) -> SuggestionOutcome:
		"""
		Ask a fresh oracle for one file; never raises.
		"""
		last: PartialSuggestion | None = None
		try:
			engine = self.engine_factory()
			for partial in engine.suggest_stream(current_name, content):
				last = partial
		except Exception as exc:
			logger.warning(f"Suggestion failed for {current_name}: {exc.__class__.__name__}: {exc}")
			return SuggestionOutcome.failure(_describe(exc))
		if last is None or not last.new_name:
			logger.warning(f"No suggestion produced for {current_name}")
			return SuggestionOutcome.failure(NO_NAME_ERROR)
		return SuggestionOutcome.success(normalize_suggested_name(current_name, last.new_name))

	#============================================
	def _apply_outcome(self, record: FileRecord, outcome: SuggestionOutcome) -> None:
		record.suggested_name = outcome.as_marker()
		if outcome.ok:
			record.status = STATUS_SUGGESTED
			record.error = ""
		else:
			record.status = STATUS_SUGGESTION_FAILED
			record.error = outcome.error or NO_NAME_ERROR

	#============================================
	def run_rename_round(
		self,
		records: Iterable[FileRecord] | None = None,
		on_update: Callable[[FileRecord], None] | None = None,
	) -> list[FileRecord]:
		"""
		Rename every record holding a usable suggestion, one at a time.

		A failed rename is recorded on its record and the pass continues.
		Earlier renames are not rolled back.

		Args:
			records: Records to process; defaults to the whole registry.
			on_update: Called with each record that changed state.

		Returns:
			Records that changed state, in registry order.

		Raises:
			SuggestionRoundBusyError: A suggestion round is in flight.
		"""
		self._begin_round("rename")
		try:
			changed: list[FileRecord] = []
			for record in self._resolve(records):
				if record.status != STATUS_SUGGESTED or not record.has_usable_suggestion():
					continue
				old_name = record.original_name
				new_name = record.suggested_name
				try:
					move_or_rename(self.base_dir, old_name, new_name)
				except (OSError, ValueError) as exc:
					message = _describe(exc)
					logger.warning(f"Rename failed for {old_name} -> {new_name}: {message}")

					def _mark_failed(rec: FileRecord, text: str = message) -> None:
						rec.status = STATUS_RENAME_FAILED
						rec.error = text

					self.registry.update(record.id, _mark_failed)
				else:
					logger.info(f"Renamed {old_name} -> {new_name}")

					def _mark_renamed(rec: FileRecord, name: str = new_name) -> None:
						rec.status = STATUS_RENAMED
						rec.original_name = name
						rec.error = ""

					self.registry.update(record.id, _mark_renamed)
				changed.append(record)
				if on_update:
					on_update(record)
			return changed
		finally:
			self._round_lock.release()
