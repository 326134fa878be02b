#!/usr/bin/env python3
"""
Command line interface for suggest-n-rename.
"""

# Standard Library
import argparse
from collections.abc import Callable
import logging
from pathlib import Path
import sys
import urllib.error
import urllib.request

# local repo modules
from .config import AppConfig, apply_user_config, load_user_config, parse_exts
from .llm_engine import LLMEngine
from .llm_utils import apple_models_available, choose_model
from .registry import ERROR_PREFIX, STATUS_RENAMED, STATUS_SUGGESTED, FileRecord, FileRegistry
from .scanner import create_demo_files, iter_files, read_text_content
from .suggester import SuggestionOrchestrator
from .transports import AppleTransport, OllamaTransport

#============================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse CLI arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Suggest descriptive filenames for text files with a local LLM."
	)
	parser.add_argument(
		"-p",
		"--path",
		dest="path",
		help="Folder holding the files (default ~/Desktop).",
	)
	parser.add_argument(
		"--demo",
		dest="demo",
		action="store_true",
		help="Write three poorly named demo files into the folder first.",
	)
	parser.add_argument(
		"-a",
		"--apply",
		dest="apply",
		action="store_true",
		help="Rename files after suggesting (default: suggest only).",
	)
	parser.add_argument(
		"-m",
		"--max-files",
		dest="max_files",
		type=int,
		help="Maximum files to process.",
	)
	parser.add_argument(
		"-w",
		"--workers",
		dest="max_workers",
		type=int,
		help="Concurrent suggestion requests (default one per file).",
	)
	parser.add_argument(
		"-e",
		"--ext",
		dest="extensions",
		action="append",
		help="Include only files with these extensions (repeatable, default txt).",
	)
	parser.add_argument(
		"-o",
		"--model",
		dest="model",
		help="Override Ollama model name.",
	)
	parser.add_argument(
		"--llm-backend",
		dest="llm_backend",
		choices=["macos", "ollama"],
		help="Choose LLM backend: macos (default) or ollama.",
	)
	parser.add_argument(
		"-x",
		"--context",
		dest="context",
		help="Optional context string added to LLM prompts (e.g., 'Client ACME').",
	)
	parser.add_argument(
		"-c",
		"--config",
		dest="config_path",
		help="YAML or JSON file with default settings.",
	)
	parser.add_argument(
		"-v",
		"--verbose",
		dest="verbose",
		action="store_true",
		help="Verbose logging.",
	)
	return parser.parse_args(argv)


#============================================


def build_config(args: argparse.Namespace) -> AppConfig:
	"""
	Build runtime config from a config file and args; args win.
	"""
	config = AppConfig()
	if args.config_path:
		config.config_path = Path(args.config_path).expanduser()
		apply_user_config(config, load_user_config(config.config_path))
	if args.path:
		config.base_dir = Path(args.path).expanduser()
	if args.max_files:
		config.max_files = args.max_files
	if args.max_workers:
		config.max_workers = args.max_workers
	exts = parse_exts(args.extensions) if args.extensions else None
	if exts:
		config.include_extensions = exts
	if args.model:
		config.model_override = args.model
	if args.llm_backend:
		config.llm_backend = args.llm_backend
	if args.context:
		config.context = args.context
	if args.demo:
		config.demo = True
	if args.apply:
		config.apply = True
	if args.verbose:
		config.verbose = True
	return config


#============================================


def build_llm(config: AppConfig) -> Callable[[], LLMEngine]:
	"""
	Select backends once and return a factory of fresh engines.

	Every call of the factory builds new transports, so concurrent
	requests never share a session.

	Args:
		config: Application configuration.

	Returns:
		Zero-argument callable producing an LLMEngine.
	"""
	model = choose_model(config.model_override)
	base_url = config.ollama_url
	timeout = config.request_timeout

	def _ollama() -> OllamaTransport:
		return OllamaTransport(model=model, base_url=base_url, timeout=timeout)

	builders: list[Callable[[], object]] = []
	if config.llm_backend == "ollama":
		if not _ollama_available(base_url):
			raise RuntimeError("Ollama backend selected but service is not reachable.")
		builders = [_ollama]
	elif not apple_models_available():
		if not _ollama_available(base_url):
			raise RuntimeError("No available LLM backend (Apple Foundation Models or Ollama).")
		logging.warning("Apple Foundation Models unavailable; using Ollama backup.")
		builders = [_ollama]
	else:
		builders = [AppleTransport]
		if _ollama_available(base_url):
			builders.append(_ollama)

	def factory() -> LLMEngine:
		return LLMEngine(transports=[build() for build in builders], context=config.context)

	return factory


#============================================


def _color(text: str, code: str) -> str:
	if sys.stdout.isatty():
		return f"\033[{code}m{text}\033[0m"
	return text


def _status_color(status: str) -> str:
	if status == STATUS_RENAMED:
		return "32"
	if status == STATUS_SUGGESTED:
		return "34"
	if status.endswith("Failed"):
		return "31"
	return "37"


#============================================


def _ollama_available(base_url: str) -> bool:
	"""
	Check if Ollama service is up.
	"""
	try:
		request = urllib.request.Request(f"{base_url}/api/tags", method="GET")
		with urllib.request.urlopen(request, timeout=2) as response:
			return response.status < 400
	except (urllib.error.URLError, OSError, ValueError):
		return False


#============================================


def print_record(record: FileRecord, label: str) -> None:
	tag = _color(f"[{label}]", _status_color(record.status))
	print(f"{tag} {record.original_name}")
	if record.suggested_name and not record.suggested_name.startswith(ERROR_PREFIX):
		print(f"    suggestion: {record.suggested_name}")
	print(f"    status: {record.status}")
	if record.error:
		print(f"    {_color('[WHY]', '35')} {record.error}")


#============================================


def register_files(config: AppConfig, registry: FileRegistry) -> list[FileRecord]:
	"""
	Register the files found in the base directory.
	"""
	if config.demo:
		create_demo_files(config.normalized_base_dir())
	files = iter_files(config)
	print(f"{_color('[SCAN]', '34')} Found {len(files)} files in {config.normalized_base_dir()}.")
	return registry.register_many((path.name, read_text_content(path)) for path in files)


#============================================


def main(argv: list[str] | None = None) -> int:
	"""
	Entry point for the CLI.
	"""
	args = parse_args(argv)
	config = build_config(args)
	if config.verbose:
		logging.basicConfig(level=logging.INFO)
	else:
		logging.basicConfig(level=logging.WARNING)
	registry = FileRegistry()
	records = register_files(config, registry)
	if not records:
		return 0
	engine_factory = build_llm(config)
	orchestrator = SuggestionOrchestrator(
		registry,
		engine_factory,
		base_dir=config.normalized_base_dir(),
		max_workers=config.max_workers,
	)
	orchestrator.run_suggestion_round(on_update=lambda record: print_record(record, "SUGGEST"))
	suggested = sum(1 for record in registry if record.status == STATUS_SUGGESTED)
	print(f"{_color('[SUMMARY]', '36')} {suggested} of {len(registry)} files have a suggestion.")
	if not config.apply:
		return 0
	if not registry.can_rename():
		print(f"{_color('[SUMMARY]', '36')} Nothing to rename.")
		return 0
	orchestrator.run_rename_round(on_update=lambda record: print_record(record, "RENAME"))
	renamed = sum(1 for record in registry if record.status == STATUS_RENAMED)
	print(f"{_color('[SUMMARY]', '36')} Renamed {renamed} of {len(registry)} files.")
	return 0


#============================================


if __name__ == "__main__":
	sys.exit(main())
