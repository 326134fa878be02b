#!/usr/bin/env python3
"""
Backend-agnostic naming engine with fallback and strict parsing.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator
from dataclasses import dataclass, field

# local repo modules
from .llm_parsers import ParseError, PartialSuggestion, parse_partial_suggestion, parse_suggestion_response
from .llm_prompts import (
	SUGGEST_EXAMPLE_OUTPUT,
	SuggestRequest,
	build_format_fix_prompt,
	build_suggest_prompt,
	build_suggest_prompt_minimal,
)
from .llm_utils import (
	_is_context_window_error,
	_is_guardrail_error,
	_print_llm,
	log_parse_failure,
)
from .transports.base import LLMTransport

#============================================

PURPOSE = "filename based on content"
MAX_TOKENS = 120

#============================================


@dataclass(slots=True)
class LLMEngine:
	"""
	Naming oracle for one request at a time.

	Build a fresh engine (and fresh transports) for every concurrent
	request; an engine refuses to serve two streams at once.
	"""
	transports: list[LLMTransport]
	context: str | None = None
	_in_use: bool = field(default=False, init=False, repr=False)

	#============================================
	def suggest_stream(self, current_name: str, content: str) -> Iterator[PartialSuggestion]:
		"""
		Stream increasingly complete suggestions for one file.

		The last value yielded is strictly parsed and authoritative. An empty
		model reply yields nothing.

		Args:
			current_name: Filename on disk.
			content: Text content of the file.

		Yields:
			PartialSuggestion values.
		"""
		if self._in_use:
			raise RuntimeError("LLMEngine is already answering a request.")
		self._in_use = True
		try:
			req = SuggestRequest(current_name=current_name, content=content, context=self.context)
			prompt = build_suggest_prompt(req)
			raw = ""
			for raw in self._stream_with_fallback(
				prompt,
				purpose=PURPOSE,
				max_tokens=MAX_TOKENS,
				retry_prompt=build_suggest_prompt_minimal(req),
			):
				yield parse_partial_suggestion(raw)
			if not raw.strip():
				return
			yield self._parse_with_retry(prompt, raw, purpose=PURPOSE, max_tokens=MAX_TOKENS)
		finally:
			self._in_use = False

	#============================================
	def _stream_with_fallback(
		self,
		prompt: str,
		*,
		purpose: str,
		max_tokens: int,
		retry_prompt: str | None,
	) -> Iterator[str]:
		"""
		Yield the accumulated reply text from the first transport that answers.

		Falls through to the next transport only on guardrail or context
		window errors raised before any text arrived.
		"""
		last_exc: Exception | None = None
		for idx, transport in enumerate(self.transports):
			attempts = [prompt]
			if retry_prompt and idx == 0:
				attempts.append(retry_prompt)
			for attempt_no, attempt in enumerate(attempts):
				text = ""
				try:
					if attempt_no:
						_print_llm(f"retrying {transport.name} with minimal prompt for {purpose}")
					else:
						_print_llm(f"asking {transport.name} for {purpose}")
					for piece in transport.stream(attempt, purpose=purpose, max_tokens=max_tokens):
						text += piece
						yield text
					return
				except Exception as exc:
					if text:
						raise
					if not (_is_guardrail_error(exc) or _is_context_window_error(exc)):
						raise
					last_exc = exc
		if last_exc:
			raise last_exc
		raise RuntimeError("No LLM transports available.")

	#============================================
	def _parse_with_retry(
		self,
		original_prompt: str,
		raw_text: str,
		*,
		purpose: str,
		max_tokens: int,
	) -> PartialSuggestion:
		try:
			return parse_suggestion_response(raw_text)
		except ParseError as exc:
			excerpt = " ".join(raw_text.split())[:160]
			print(f"[WHY] parse_error: {exc} (excerpt: {excerpt})")
			log_parse_failure(
				purpose=purpose,
				error=exc,
				raw_text=exc.raw_text or raw_text,
				prompt=original_prompt,
				stage="initial",
			)
		fix_prompt = build_format_fix_prompt(original_prompt, SUGGEST_EXAMPLE_OUTPUT)
		last_parse: ParseError | None = None
		last_transport: Exception | None = None
		last_fixed: str | None = None
		for transport in self.transports:
			try:
				_print_llm(f"asking {transport.name} for {purpose} (format fix)")
				fixed = "".join(
					transport.stream(
						fix_prompt,
						purpose=f"{purpose} (format fix)",
						max_tokens=max_tokens,
					)
				)
				last_fixed = fixed
			except Exception as transport_exc:
				last_transport = transport_exc
				continue
			try:
				return parse_suggestion_response(fixed)
			except ParseError as parse_exc:
				last_parse = parse_exc
				log_parse_failure(
					purpose=purpose,
					error=parse_exc,
					raw_text=parse_exc.raw_text or fixed,
					prompt=fix_prompt,
					stage=f"format fix ({transport.name})",
				)
				continue
		if last_parse:
			raise ParseError(str(last_parse), raw_text=last_fixed or raw_text)
		if last_transport:
			raise last_transport
		raise ParseError("Format-fix retry failed.", raw_text=raw_text)
