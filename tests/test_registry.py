#!/usr/bin/env python3
"""
Tests for the in-memory file registry.
"""

import threading

import pytest

from suggest_n_rename.registry import (
	STATUS_PENDING,
	STATUS_SUGGESTED,
	FileRecord,
	FileRegistry,
	RecordNotFoundError,
	is_error_marker,
)


def test_register_keeps_insertion_order():
	registry = FileRegistry()
	names = ["b.txt", "a.txt", "c.txt"]
	for name in names:
		registry.register(name, f"content of {name}")
	assert [record.original_name for record in registry.list_all()] == names
	assert len(registry) == 3


def test_new_records_start_pending_with_unique_ids():
	registry = FileRegistry()
	records = registry.register_many([("a.txt", "x"), ("b.txt", "y")])
	assert all(record.status == STATUS_PENDING for record in records)
	assert all(record.suggested_name is None for record in records)
	assert records[0].id != records[1].id


def test_get_unknown_id_raises():
	registry = FileRegistry()
	with pytest.raises(RecordNotFoundError):
		registry.get("missing")


def test_update_targets_only_one_record():
	registry = FileRegistry()
	first, second = registry.register_many([("a.txt", "x"), ("b.txt", "y")])

	def _suggest(record: FileRecord) -> None:
		record.suggested_name = "alpha.txt"
		record.status = STATUS_SUGGESTED

	updated = registry.update(first.id, _suggest)
	assert updated is first
	assert first.status == STATUS_SUGGESTED
	assert second.status == STATUS_PENDING
	assert second.suggested_name is None


def test_update_unknown_id_raises():
	registry = FileRegistry()
	with pytest.raises(RecordNotFoundError):
		registry.update("missing", lambda record: None)


def test_duplicate_id_rejected():
	record = FileRecord(original_name="a.txt", content="x")
	with pytest.raises(ValueError):
		FileRegistry([record, record])


def test_concurrent_updates_are_not_lost():
	registry = FileRegistry()
	records = registry.register_many((f"f{i}.txt", "x") for i in range(20))

	def _worker(record_id: str, name: str) -> None:
		def _set(record: FileRecord) -> None:
			record.suggested_name = name
		registry.update(record_id, _set)

	threads = [
		threading.Thread(target=_worker, args=(record.id, f"name_{idx}.txt"))
		for idx, record in enumerate(records)
	]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()
	assert [record.suggested_name for record in registry] == [
		f"name_{idx}.txt" for idx in range(20)
	]


def test_can_rename_requires_usable_suggestion():
	registry = FileRegistry()
	record = registry.register("a.txt", "x")
	assert registry.can_rename() is False

	def _fail(rec: FileRecord) -> None:
		rec.suggested_name = "Error: boom"
		rec.status = STATUS_SUGGESTED

	registry.update(record.id, _fail)
	assert registry.can_rename() is False

	def _ok(rec: FileRecord) -> None:
		rec.suggested_name = "alpha.txt"

	registry.update(record.id, _ok)
	assert registry.can_rename() is True


def test_error_marker_detection():
	assert is_error_marker("Error: Could not generate a name.")
	assert not is_error_marker("error_report.txt")
	assert not is_error_marker(None)
