#!/usr/bin/env python3
"""
Tests for filename normalization and model helpers.
"""

import pytest

from suggest_n_rename import llm_utils
from suggest_n_rename.llm_utils import (
	MAX_FILENAME_CHARS,
	choose_model,
	normalize_suggested_name,
	snake_case_stem,
)


@pytest.mark.parametrize(
	"current, proposed, expected",
	[
		("file_tmp_1.txt", "q3_budget_review.txt", "q3_budget_review.txt"),
		("stuff.txt", "Classic Lasagna Recipe", "classic_lasagna_recipe.txt"),
		("stuff.txt", "japan-trip--itinerary.txt.txt", "japan_trip_itinerary.txt"),
		("stuff.txt", "../../etc/passwd", "passwd.txt"),
		("stuff.txt", "  ", "stuff.txt"),
		("notes", "Meeting Notes", "meeting_notes"),
		("Report.MD", "\"Final Report.md\"", "final_report.MD"),
	],
)
def test_normalize_suggested_name(current, proposed, expected):
	assert normalize_suggested_name(current, proposed) == expected


def test_normalized_name_never_looks_like_error_marker():
	name = normalize_suggested_name("a.txt", "Error: model failed")
	assert not name.startswith("Error:")
	assert name == "error_model_failed.txt"


def test_snake_case_stem_is_bounded():
	stem = snake_case_stem("word " * 100)
	assert len(stem) <= MAX_FILENAME_CHARS
	assert not stem.endswith("_")


def test_choose_model_override():
	assert choose_model("custom:7b") == "custom:7b"


def test_choose_model_uses_ram_when_vram_unknown(monkeypatch):
	monkeypatch.setattr(llm_utils, "get_vram_size_in_gb", lambda: None)
	monkeypatch.setattr(llm_utils, "total_ram_bytes", lambda: 16 * 1024 * 1024 * 1024)
	assert choose_model(None) == "phi4:14b-q4_K_M"


def test_guardrail_detection_by_name():
	class GuardrailViolationError(Exception):
		pass

	assert llm_utils._is_guardrail_error(GuardrailViolationError("x"))
	assert not llm_utils._is_guardrail_error(RuntimeError("x"))
