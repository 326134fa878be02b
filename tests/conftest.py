"""
Pytest config to ensure local package imports work without installation.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _add_repo_root_to_path() -> None:
	"""
	Insert the repo root into sys.path for local imports.
	"""
	repo_root = Path(__file__).resolve().parent.parent
	repo_root_str = str(repo_root)
	if repo_root_str not in sys.path:
		sys.path.insert(0, repo_root_str)


_add_repo_root_to_path()

from suggest_n_rename.llm_parsers import PartialSuggestion  # noqa: E402


class StubEngine:
	"""
	Test-only oracle replaying a scripted stream.
	"""

	def __init__(self, script: dict) -> None:
		self.script = script
		self.calls: list[str] = []

	def suggest_stream(self, current_name: str, content: str):
		self.calls.append(current_name)
		entry = self.script.get(current_name, [])
		if isinstance(entry, Exception):
			raise entry
		for name in entry:
			yield PartialSuggestion(new_name=name, raw_text=name or "")


class StubEngineFactory:
	"""
	Builds a new StubEngine on every call and remembers each one.
	"""

	def __init__(self, script: dict) -> None:
		self.script = script
		self.engines: list[StubEngine] = []

	def __call__(self) -> StubEngine:
		engine = StubEngine(self.script)
		self.engines.append(engine)
		return engine
