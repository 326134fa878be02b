"""
suggest_n_rename
================

Suggest descriptive filenames for text files with a local LLM and rename them.
"""

__all__ = [
	"config",
	"llm_engine",
	"registry",
	"suggester",
	"transports",
]
