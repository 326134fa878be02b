#!/usr/bin/env python3
"""
In-memory registry of the files under consideration.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
import threading
import uuid

#============================================


ERROR_PREFIX = "Error:"

STATUS_PENDING = "Pending"
STATUS_SUGGESTED = "Suggested"
STATUS_SUGGESTION_FAILED = "SuggestionFailed"
STATUS_RENAMED = "Renamed"
STATUS_RENAME_FAILED = "RenameFailed"

#============================================


class RecordNotFoundError(KeyError):
	"""
	Raised when no record carries the requested id.
	"""


#============================================


def is_error_marker(value: str | None) -> bool:
	"""
	True when a suggested name is a failure sentinel rather than a filename.
	"""
	return value is not None and value.startswith(ERROR_PREFIX)


def _new_id() -> str:
	return uuid.uuid4().hex


#============================================


@dataclass(slots=True)
class FileRecord:
	"""
	One file under consideration.

	Attributes:
		original_name: Current on-disk filename.
		content: Text used as generation input.
		suggested_name: Proposed name, or an error marker after a failed suggestion.
		status: Human-readable state.
		error: Underlying error text for failed states.
		id: Stable identifier, assigned at creation.
	"""
	original_name: str
	content: str
	suggested_name: str | None = None
	status: str = STATUS_PENDING
	error: str = ""
	id: str = field(default_factory=_new_id)

	#============================================
	def has_usable_suggestion(self) -> bool:
		return bool(self.suggested_name) and not is_error_marker(self.suggested_name)


#============================================


class FileRegistry:
	"""
	Ordered collection of FileRecord values with lookup by id.

	Structural access is serialized by a lock so completions arriving on
	worker threads cannot lose updates.
	"""

	def __init__(self, records: Iterable[FileRecord] | None = None) -> None:
		self._lock = threading.RLock()
		self._records: dict[str, FileRecord] = {}
		for record in records or []:
			self._add(record)

	#============================================
	def _add(self, record: FileRecord) -> FileRecord:
		with self._lock:
			if record.id in self._records:
				raise ValueError(f"Duplicate record id: {record.id}")
			self._records[record.id] = record
		return record

	#============================================
	def register(self, original_name: str, content: str) -> FileRecord:
		"""
		Create a record for a file and append it to the registry.

		Args:
			original_name: Filename on disk.
			content: Text content of the file.

		Returns:
			The new record.
		"""
		return self._add(FileRecord(original_name=original_name, content=content))

	#============================================
	def register_many(self, items: Iterable[tuple[str, str]]) -> list[FileRecord]:
		return [self.register(name, content) for name, content in items]

	#============================================
	def list_all(self) -> list[FileRecord]:
		"""
		Records in insertion order.
		"""
		with self._lock:
			return list(self._records.values())

	#============================================
	def get(self, record_id: str) -> FileRecord:
		with self._lock:
			try:
				return self._records[record_id]
			except KeyError:
				raise RecordNotFoundError(record_id) from None

	#============================================
	def update(self, record_id: str, mutator: Callable[[FileRecord], None]) -> FileRecord:
		"""
		Apply a field-level change to exactly the record with that id.

		Args:
			record_id: Target record id.
			mutator: Callable receiving the record and changing it in place.

		Returns:
			The updated record.
		"""
		with self._lock:
			record = self.get(record_id)
			mutator(record)
			return record

	#============================================
	def can_rename(self) -> bool:
		"""
		True when at least one record is ready for the rename round.
		"""
		with self._lock:
			return any(
				record.status == STATUS_SUGGESTED and record.has_usable_suggestion()
				for record in self._records.values()
			)

	#============================================
	def __len__(self) -> int:
		with self._lock:
			return len(self._records)

	#============================================
	def __iter__(self) -> Iterator[FileRecord]:
		return iter(self.list_all())
