#!/usr/bin/env python3
"""
Shared LLM helpers (backend-agnostic).
"""

from __future__ import annotations

# Standard Library
from datetime import datetime, timezone
import os
import platform
import re
import subprocess
import sys

#============================================


MAX_FILENAME_CHARS = 100
PROMPT_FILENAME_CHARS = 60
PROMPT_CONTENT_CHARS = 1800
MIN_MACOS_MAJOR = 26
PARSE_FAILURE_LOG = "XML_PARSE_FAILURES.log"
_NONPRINTABLE_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_PROMPT_MAX_TOKEN_LEN = 40
_WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")

_GUARDRAIL_ERRORS: tuple[type[BaseException], ...] = ()
try:
	from applefoundationmodels.exceptions import GuardrailViolationError

	_GUARDRAIL_ERRORS = (GuardrailViolationError,)
except Exception:
	_GUARDRAIL_ERRORS = ()


def _print_llm(label: str) -> None:
	if sys.stdout.isatty():
		print(f"\033[36m[LLM]\033[0m {label}")
	else:
		print(f"[LLM] {label}")


#============================================


def snake_case_stem(text: str) -> str:
	"""
	Lower-case words joined by single underscores.
	"""
	words = [word for word in _WORD_SPLIT_RE.split(text.lower()) if word]
	stem = "_".join(words)
	if len(stem) > MAX_FILENAME_CHARS:
		stem = stem[:MAX_FILENAME_CHARS].rstrip("_")
	return stem


#============================================


def normalize_suggested_name(current_name: str, proposed: str) -> str:
	"""
	Force a proposed filename into snake_case with the current extension.

	Args:
		current_name: Filename on disk; its extension is preserved.
		proposed: Raw name returned by the model.

	Returns:
		Normalized filename, never empty.
	"""
	ext = os.path.splitext(current_name)[1]
	name = proposed.strip().strip('"').strip("'")
	name = os.path.basename(name.replace("\\", "/"))
	while ext and name.lower().endswith(ext.lower()):
		name = name[: -len(ext)]
	stem = snake_case_stem(name)
	if not stem:
		stem = snake_case_stem(os.path.splitext(current_name)[0]) or "file"
	return f"{stem}{ext}"


#============================================


def _sanitize_prompt_text(
	value: object,
	max_token_len: int = _PROMPT_MAX_TOKEN_LEN,
	max_chars: int | None = None,
) -> str:
	if value is None:
		return ""
	text = str(value)
	if not text:
		return ""
	text = text.replace("\r\n", "\n").replace("\r", "\n")
	text = _NONPRINTABLE_RE.sub(" ", text)
	text = text.replace("\t", " ")
	lines: list[str] = []
	seen: set[str] = set()
	for raw in text.splitlines():
		compact = " ".join(raw.split())
		if not compact:
			continue
		tokens = [token for token in compact.split(" ") if len(token) <= max_token_len]
		if not tokens:
			continue
		line = " ".join(tokens)
		key = line.lower()
		if key in seen:
			continue
		seen.add(key)
		lines.append(line)
	cleaned = "\n".join(lines)
	if max_chars and len(cleaned) > max_chars:
		cleaned = cleaned[: max_chars - 3].rstrip() + "..."
	return cleaned


#============================================


def extract_xml_tag_content(raw_text: str, tag: str) -> str:
	"""
	Extract the last occurrence of a given XML-like tag.

	An unclosed tag yields everything after its opening bracket, which is
	what a partially streamed reply looks like.
	"""
	if not raw_text:
		return ""
	lower = raw_text.lower()
	open_token = f"<{tag}"
	close_token = f"</{tag}"
	start_idx = lower.rfind(open_token)
	if start_idx == -1:
		return ""
	gt_idx = raw_text.find(">", start_idx)
	if gt_idx == -1:
		return ""
	close_idx = lower.find(close_token, gt_idx + 1)
	if close_idx == -1:
		content = raw_text[gt_idx + 1 :]
		partial_close = content.rfind("<")
		if partial_close != -1:
			content = content[:partial_close]
		return content.strip()
	content = raw_text[gt_idx + 1 : close_idx]
	return content.strip()


#============================================


def log_parse_failure(
	*,
	purpose: str,
	error: Exception,
	raw_text: str,
	prompt: str,
	stage: str,
) -> None:
	"""
	Append a malformed model reply to the parse failure log.
	"""
	stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
	try:
		with open(PARSE_FAILURE_LOG, "a", encoding="utf-8") as handle:
			handle.write("=" * 80 + "\n")
			handle.write(f"time={stamp}\n")
			handle.write(f"purpose={purpose}\n")
			handle.write(f"stage={stage}\n")
			handle.write(f"error={error}\n")
			handle.write("prompt=\n")
			handle.write(prompt.strip() + "\n")
			handle.write("raw_response=\n")
			handle.write((raw_text or "").strip() + "\n")
	except OSError:
		return


#============================================


def _parse_macos_version() -> tuple[int, int, int]:
	version_str = platform.mac_ver()[0]
	parts = [int(p) for p in version_str.split(".") if p.isdigit()]
	while len(parts) < 3:
		parts.append(0)
	return parts[0], parts[1], parts[2]


def apple_models_available() -> bool:
	try:
		from applefoundationmodels import apple_intelligence_available
	except Exception:
		return False
	arch = platform.machine().lower()
	if arch != "arm64":
		return False
	major, _minor, _patch = _parse_macos_version()
	if major < MIN_MACOS_MAJOR:
		return False
	try:
		return bool(apple_intelligence_available())
	except Exception:
		return False


def total_ram_bytes() -> int:
	"""
	Estimate total system memory.
	"""
	pages = 0
	page_size = 0
	if hasattr(os, "sysconf"):
		if "SC_PHYS_PAGES" in os.sysconf_names:
			pages = int(os.sysconf("SC_PHYS_PAGES"))
		if "SC_PAGE_SIZE" in os.sysconf_names:
			page_size = int(os.sysconf("SC_PAGE_SIZE"))
	if pages and page_size:
		return pages * page_size
	return 0


def get_vram_size_in_gb() -> int | None:
	"""
	Detect VRAM or unified memory size in GB.
	"""
	try:
		arch = subprocess.check_output(["uname", "-m"], text=True).strip()
		if arch.startswith("arm64"):
			hardware_info = subprocess.check_output(
				["system_profiler", "SPHardwareDataType"], text=True
			)
			match = re.search(r"Memory:\s(\d+)\s?GB", hardware_info)
			if match:
				return int(match.group(1))
		else:
			display_info = subprocess.check_output(
				["system_profiler", "SPDisplaysDataType"], text=True
			)
			vram_match = re.search(r"VRAM.*?: (\d+)\s?MB", display_info)
			if vram_match:
				return int(vram_match.group(1)) // 1024
	except (OSError, subprocess.SubprocessError):
		return None
	return None


def choose_model(model_override: str | None) -> str:
	"""
	Pick an Ollama model based on memory or override.
	"""
	if model_override:
		return model_override
	gb = get_vram_size_in_gb()
	if gb is None:
		ram = total_ram_bytes()
		gb = ram // (1024 * 1024 * 1024) if ram else 0
	if gb > 30:
		return "gpt-oss:20b"
	if gb > 14:
		return "phi4:14b-q4_K_M"
	if gb > 4:
		return "llama3.2:3b-instruct-q5_K_M"
	return "llama3.2:1b-instruct-q4_K_M"


#============================================


def _is_guardrail_error(exc: Exception) -> bool:
	if _GUARDRAIL_ERRORS and isinstance(exc, _GUARDRAIL_ERRORS):
		return True
	name = exc.__class__.__name__.lower()
	if "guardrail" in name:
		return True
	msg = str(exc).lower()
	return "guardrail" in msg and "unsafe" in msg


def _is_context_window_error(exc: Exception) -> bool:
	name = exc.__class__.__name__.lower()
	if "contextwindow" in name:
		return True
	msg = str(exc).lower()
	return "context window" in msg or "exceeds the maximum" in msg
