#!/usr/bin/env python3
"""
Tests for LLMEngine streaming, retry and fallback behavior.
"""

import pytest

from suggest_n_rename.llm_engine import LLMEngine
from suggest_n_rename.llm_parsers import ParseError


class GuardrailViolationError(Exception):
	pass


class DummyTransport:
	name = "Dummy"

	def __init__(self, responses=None, error: Exception | None = None, chunk: int = 7):
		self.responses = list(responses or [])
		self.error = error
		self.chunk = chunk
		self.calls: list[tuple[str, str]] = []

	def stream(self, prompt: str, *, purpose: str, max_tokens: int):
		self.calls.append((purpose, prompt))
		if self.error:
			raise self.error
		if not self.responses:
			raise RuntimeError("No response queued")
		reply = self.responses.pop(0)
		for idx in range(0, len(reply), self.chunk):
			yield reply[idx : idx + self.chunk]


def test_stream_yields_partials_then_complete_value():
	transport = DummyTransport(responses=["<new_name>q3_budget_review.txt</new_name>"])
	engine = LLMEngine(transports=[transport])
	partials = list(engine.suggest_stream("file_tmp_1.txt", "Q3 budget meeting minutes"))
	assert len(partials) > 2
	final = partials[-1]
	assert final.complete is True
	assert final.new_name == "q3_budget_review.txt"
	assert not any(p.complete for p in partials[:-1])
	names = [p.new_name for p in partials[:-1] if p.new_name]
	assert names
	assert all("q3_budget_review.txt".startswith(name) for name in names)


def test_prompt_carries_name_content_and_context():
	transport = DummyTransport(responses=["<new_name>x.txt</new_name>"])
	engine = LLMEngine(transports=[transport], context="Client ACME")
	list(engine.suggest_stream("stuff.txt", "lasagna recipe"))
	prompt = transport.calls[0][1]
	assert "original_name: stuff.txt" in prompt
	assert "lasagna recipe" in prompt
	assert "Context: Client ACME" in prompt


def test_empty_reply_yields_nothing():
	engine = LLMEngine(transports=[DummyTransport(responses=[""])])
	assert list(engine.suggest_stream("a.txt", "text")) == []


def test_format_fix_retry_on_parse_error(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	transport = DummyTransport(
		responses=["not a tag", "<new_name>good.txt</new_name>"]
	)
	engine = LLMEngine(transports=[transport])
	final = list(engine.suggest_stream("old.txt", "text"))[-1]
	assert final.new_name == "good.txt"
	assert len(transport.calls) == 2
	assert "format fix" in transport.calls[1][0]
	assert (tmp_path / "XML_PARSE_FAILURES.log").exists()


def test_parse_failure_everywhere_raises(tmp_path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	first = DummyTransport(responses=["nope", "still nope"])
	second = DummyTransport(responses=["also nope"])
	engine = LLMEngine(transports=[first, second])
	with pytest.raises(ParseError):
		list(engine.suggest_stream("old.txt", "text"))
	assert len(second.calls) == 1


def test_guardrail_fallback_to_second_transport():
	guardrail = DummyTransport(error=GuardrailViolationError("guardrail"))
	ok = DummyTransport(responses=["<new_name>ok.txt</new_name>"])
	engine = LLMEngine(transports=[guardrail, ok])
	final = list(engine.suggest_stream("old.txt", "text"))[-1]
	assert final.new_name == "ok.txt"
	assert len(guardrail.calls) == 2
	assert guardrail.calls[0][1] != guardrail.calls[1][1]
	assert len(ok.calls) == 1


def test_other_errors_propagate_without_fallback():
	broken = DummyTransport(error=RuntimeError("boom"))
	spare = DummyTransport(responses=["<new_name>ok.txt</new_name>"])
	engine = LLMEngine(transports=[broken, spare])
	with pytest.raises(RuntimeError, match="boom"):
		list(engine.suggest_stream("old.txt", "text"))
	assert spare.calls == []


def test_error_after_partial_output_is_not_retried():
	class HalfTransport(DummyTransport):
		def stream(self, prompt: str, *, purpose: str, max_tokens: int):
			self.calls.append((purpose, prompt))
			yield "<new_name>half"
			raise GuardrailViolationError("guardrail")

	half = HalfTransport()
	spare = DummyTransport(responses=["<new_name>ok.txt</new_name>"])
	engine = LLMEngine(transports=[half, spare])
	with pytest.raises(GuardrailViolationError):
		list(engine.suggest_stream("old.txt", "text"))
	assert spare.calls == []


def test_engine_refuses_concurrent_streams():
	transport = DummyTransport(
		responses=["<new_name>a.txt</new_name>", "<new_name>b.txt</new_name>"]
	)
	engine = LLMEngine(transports=[transport])
	first = engine.suggest_stream("a.txt", "alpha")
	next(first)
	second = engine.suggest_stream("b.txt", "beta")
	with pytest.raises(RuntimeError):
		next(second)
	list(first)
	assert [p.new_name for p in engine.suggest_stream("b.txt", "beta")][-1] == "b.txt"
