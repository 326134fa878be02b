#!/usr/bin/env python3
"""
Directory scanner and demo file setup.
"""

# Standard Library
import logging
from pathlib import Path

# local repo modules
from .config import AppConfig

logger = logging.getLogger(__name__)

#============================================

DEMO_FILES: list[tuple[str, str]] = [
	(
		"file_tmp_1.txt",
		"This document contains the final meeting minutes from the Q3 2025 financial review, "
		"discussing budget allocations and future projections.",
	),
	(
		"stuff.txt",
		"A recipe for classic Italian lasagna. Ingredients include pasta, ground beef, "
		"ricotta cheese, mozzarella, and a rich tomato sauce.",
	),
	(
		"mydoc_12345.txt",
		"Personal travel itinerary for a trip to Japan in spring 2026. Plans include visiting "
		"Tokyo for cherry blossoms and Kyoto for its historic temples.",
	),
]

#============================================


def create_demo_files(base_dir: Path) -> list[tuple[str, str]]:
	"""
	Write the poorly named demo files into a directory.

	Args:
		base_dir: Target directory, created when missing.

	Returns:
		(name, content) pairs that were written.
	"""
	base_dir.mkdir(parents=True, exist_ok=True)
	written: list[tuple[str, str]] = []
	for name, content in DEMO_FILES:
		path = base_dir / name
		try:
			path.write_text(content, encoding="utf-8")
		except OSError as exc:
			logger.warning(f"Failed to create demo file {path}: {exc}")
			continue
		written.append((name, content))
	return written


#============================================


def iter_files(config: AppConfig) -> list[Path]:
	"""
	List candidate files directly inside the base directory.

	Args:
		config: Application configuration.

	Returns:
		Sorted list of file paths, limited by max_files.
	"""
	root = config.normalized_base_dir()
	if not root.is_dir():
		return []
	paths: list[Path] = []
	for path in sorted(root.iterdir()):
		if not path.is_file():
			continue
		if config.exclude_hidden and path.name.startswith("."):
			continue
		if config.include_extensions:
			ext = path.suffix.lower().lstrip(".")
			if ext not in config.include_extensions:
				continue
		paths.append(path)
	if config.max_files:
		paths = paths[: config.max_files]
	return paths


#============================================


def read_text_content(path: Path, max_chars: int = 4000) -> str:
	"""
	Read a text file for use as generation input.

	Args:
		path: File path.
		max_chars: Cap on returned characters.

	Returns:
		Whitespace-collapsed text, empty when unreadable.
	"""
	try:
		text_blob = path.read_text(encoding="utf-8", errors="ignore")
	except OSError as exc:
		logger.warning(f"Could not read {path}: {exc}")
		return ""
	cleaned = " ".join(text_blob.split())
	return cleaned[:max_chars]
