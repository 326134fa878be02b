#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from dataclasses import dataclass, field
from pathlib import Path
import json

# PIP3 modules
import yaml

#============================================


def _default_extensions() -> set[str]:
	return {"txt"}


#============================================


@dataclass(slots=True)
class AppConfig:
	"""
	Runtime configuration settings.

	Attributes:
		base_dir: Folder holding the files to rename.
		include_extensions: Extensions considered for suggestions.
		exclude_hidden: Skip dotfiles when True.
		max_files: Optional limit.
		max_workers: Thread pool size for a suggestion round (None = one per file).
		llm_backend: LLM backend selector ("macos" or "ollama").
		model_override: Optional Ollama model name.
		ollama_url: Base URL of the Ollama service.
		request_timeout: Per-request HTTP timeout for Ollama, in seconds.
		context: Optional context string added to prompts.
		demo: Write the demo files into base_dir before scanning.
		apply: Rename files after suggesting.
		config_path: Optional user config path.
	"""
	base_dir: Path = field(default_factory=lambda: Path.home() / "Desktop")
	include_extensions: set[str] | None = field(default_factory=_default_extensions)
	exclude_hidden: bool = True
	max_files: int | None = 20
	max_workers: int | None = None
	llm_backend: str = "macos"
	model_override: str | None = None
	ollama_url: str = "http://localhost:11434"
	request_timeout: float = 30.0
	context: str | None = None
	demo: bool = False
	apply: bool = False
	verbose: bool = False
	config_path: Path | None = None

	#============================================
	def normalized_base_dir(self) -> Path:
		"""
		Normalize the base directory.

		Returns:
			Normalized Path.
		"""
		base: Path = self.base_dir.expanduser().resolve()
		return base


#============================================
def parse_exts(exts: list[str] | None) -> set[str] | None:
	"""
	Normalize extension filters.

	Args:
		exts: Extensions from CLI.

	Returns:
		Set of lowercase extensions or None.
	"""
	if not exts:
		return None
	cleaned: set[str] = set()
	for ext in exts:
		if ext:
			cleaned.add(ext.lower().lstrip("."))
	if not cleaned:
		return None
	return cleaned


#============================================


def load_user_config(config_path: Path | None) -> dict:
	"""
	Load user configuration from yaml or json.

	Args:
		config_path: Path to config file.

	Returns:
		Dictionary of loaded values or empty dict.
	"""
	if not config_path:
		return {}
	if not config_path.exists():
		return {}
	if config_path.suffix.lower() in {".yml", ".yaml"}:
		with config_path.open("r", encoding="utf-8") as handle:
			loaded = yaml.safe_load(handle)
			return loaded or {}
	with config_path.open("r", encoding="utf-8") as handle:
		return json.load(handle)


#============================================


def apply_user_config(config: AppConfig, values: dict) -> AppConfig:
	"""
	Copy known keys from a loaded user config onto the runtime config.

	Unknown keys are ignored.
	"""
	for key, value in values.items():
		if key not in AppConfig.__slots__:
			continue
		if key == "base_dir" and value is not None:
			value = Path(str(value)).expanduser()
		elif key == "include_extensions":
			if isinstance(value, str):
				value = [value]
			value = parse_exts(list(value) if value else None)
		setattr(config, key, value)
	return config
