#!/usr/bin/env python3
from __future__ import annotations

from .apple import AppleTransport
from .ollama import OllamaTransport

__all__ = ["AppleTransport", "OllamaTransport"]
