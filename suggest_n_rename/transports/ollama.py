#!/usr/bin/env python3
"""
Ollama chat transport (streamed).
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator
import json
import urllib.request


class OllamaTransport:
	name = "Ollama"

	def __init__(
		self,
		model: str,
		base_url: str = "http://localhost:11434",
		system_message: str = "",
		timeout: float = 30.0,
	) -> None:
		self.model = model
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout
		self.messages: list[dict[str, str]] = []
		if system_message:
			self.messages.append({"role": "system", "content": system_message})

	def stream(self, prompt: str, *, purpose: str, max_tokens: int) -> Iterator[str]:
		user_message = {"role": "user", "content": prompt}
		self.messages.append(user_message)
		payload: dict[str, object] = {
			"model": self.model,
			"messages": self.messages,
			"stream": True,
			"options": {"num_predict": max_tokens},
		}
		request = urllib.request.Request(
			f"{self.base_url}/api/chat",
			data=json.dumps(payload).encode("utf-8"),
			headers={"Content-Type": "application/json"},
			method="POST",
		)
		pieces: list[str] = []
		try:
			yield from self._read_stream(request, pieces)
		except Exception:
			if self.messages and self.messages[-1] is user_message:
				self.messages.pop()
			raise
		if pieces:
			self.messages.append({"role": "assistant", "content": "".join(pieces)})

	def _read_stream(self, request: urllib.request.Request, pieces: list[str]) -> Iterator[str]:
		with urllib.request.urlopen(request, timeout=self.timeout) as response:
			if response.status >= 400:
				raise RuntimeError(f"Ollama chat error: status {response.status}")
			for raw_line in response:
				line = raw_line.strip()
				if not line:
					continue
				parsed = json.loads(line.decode("utf-8"))
				if parsed.get("error"):
					raise RuntimeError(f"Ollama chat error: {parsed['error']}")
				piece = parsed.get("message", {}).get("content", "")
				if piece:
					pieces.append(piece)
					yield piece
				if parsed.get("done"):
					break
