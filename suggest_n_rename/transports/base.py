#!/usr/bin/env python3
"""
Transport interface for streaming LLM backends.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol


class LLMTransport(Protocol):
	name: str

	def stream(self, prompt: str, *, purpose: str, max_tokens: int) -> Iterator[str]:
		"""
		Send a prompt and yield raw model text as it arrives.
		"""
