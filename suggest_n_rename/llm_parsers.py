#!/usr/bin/env python3
"""
Backend-agnostic response parsers.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import html
import re

# local repo modules
from .llm_utils import extract_xml_tag_content

#============================================


class ParseError(RuntimeError):
	"""
	Raised when a model response does not match the required tag.
	"""

	def __init__(self, message: str, raw_text: str = "") -> None:
		super().__init__(message)
		self.raw_text = raw_text


@dataclass(slots=True)
class PartialSuggestion:
	"""
	A possibly incomplete suggestion taken from a streamed reply.

	Attributes:
		new_name: Name seen so far, or None before the tag opened.
		raw_text: Accumulated reply text.
		complete: True for the strictly parsed final value.
	"""
	new_name: str | None
	raw_text: str
	complete: bool = False


_CODE_FENCE_RE = re.compile(r"```[a-zA-Z0-9_+-]*\n(.*?)```", re.DOTALL)


def _strip_code_fences(text: str) -> str:
	if not text:
		return ""
	cleaned = text.strip()
	if "```" not in cleaned:
		return cleaned
	def _unwrap(match: re.Match) -> str:
		return match.group(1)
	cleaned = _CODE_FENCE_RE.sub(_unwrap, cleaned)
	return cleaned.strip()


def _coerce_body(text: str) -> str:
	cleaned = _strip_code_fences(text).strip().strip('"').strip("'")
	if "&lt;new_name" in cleaned.lower():
		cleaned = html.unescape(cleaned)
	return cleaned


def parse_suggestion_response(text: str) -> PartialSuggestion:
	body = _coerce_body(text)
	if "</new_name" not in body.lower():
		raise ParseError("Missing <new_name> in suggestion response.", text)
	new_name = extract_xml_tag_content(body, "new_name")
	if not new_name:
		raise ParseError("Empty <new_name> in suggestion response.", text)
	if "\n" in new_name:
		raise ParseError("Multi-line <new_name> in suggestion response.", text)
	return PartialSuggestion(new_name=new_name, raw_text=text, complete=True)


def parse_partial_suggestion(text: str) -> PartialSuggestion:
	"""
	Best-effort view of a reply that may still be streaming.
	"""
	body = _coerce_body(text)
	new_name = extract_xml_tag_content(body, "new_name") or None
	return PartialSuggestion(new_name=new_name, raw_text=text)
