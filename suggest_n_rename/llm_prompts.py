#!/usr/bin/env python3
"""
Backend-agnostic prompt builders.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import os

# local repo modules
from .llm_utils import PROMPT_CONTENT_CHARS, PROMPT_FILENAME_CHARS, _sanitize_prompt_text

#============================================


@dataclass(slots=True)
class SuggestRequest:
	current_name: str
	content: str
	context: str | None = None

	#============================================
	@property
	def extension(self) -> str:
		return os.path.splitext(self.current_name)[1].lower()


SUGGEST_SCHEMA_XML = "<new_name>descriptive_snake_case_name.ext</new_name>"
SUGGEST_EXAMPLE_OUTPUT = "<new_name>q3_budget_review.txt</new_name>"
MINIMAL_CONTENT_CHARS = 240


def build_suggest_prompt(req: SuggestRequest) -> str:
	lines: list[str] = []
	if req.context:
		lines.append(f"Context: {req.context}")
	lines.append("Analyze the following file content and suggest a clear, descriptive filename.")
	lines.append(f"Use snake_case: lower-case words separated by single underscores, up to {PROMPT_FILENAME_CHARS} characters.")
	if req.extension:
		lines.append(f"Keep the original extension: {req.extension}")
	lines.append("Summarize the purpose of the file instead of listing every word.")
	lines.append("Use 2-6 meaningful words.")
	lines.append("Return only the tag shown below. Do not include code fences.")
	lines.append(SUGGEST_SCHEMA_XML)
	content = _sanitize_prompt_text(req.content, max_chars=PROMPT_CONTENT_CHARS)
	lines.append(f"original_name: {req.current_name}")
	lines.append(f"content: {content}")
	return "\n".join(lines)


def build_suggest_prompt_minimal(req: SuggestRequest) -> str:
	lines: list[str] = []
	lines.append("Suggest a clear, descriptive snake_case filename for this text.")
	if req.extension:
		lines.append(f"Keep the extension {req.extension}.")
	lines.append("Return only the tag shown below.")
	lines.append(SUGGEST_SCHEMA_XML)
	excerpt = _sanitize_prompt_text(req.content, max_chars=MINIMAL_CONTENT_CHARS)
	lines.append(f"original_name: {req.current_name}")
	lines.append(f"excerpt: {excerpt}")
	return "\n".join(lines)


def build_format_fix_prompt(original_prompt: str, example_output: str) -> str:
	lines = [
		"Your previous reply did not match the required tag.",
		"Reply with the tag only, no extra text, like this:",
		example_output,
		"",
		original_prompt,
	]
	return "\n".join(lines)
