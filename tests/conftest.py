# Multiprompt
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Multiprompt.
#
# Multiprompt is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""Pytest configuration for multiprompt tests."""

import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

# Ensure src/multiprompt is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from multiprompt.core.config import PROVIDERS, ComparatorConfig  # noqa: E402


@pytest.fixture
def gemini_ok():
    """Minimal successful generateContent body."""
    return {"candidates": [{"content": {"parts": [{"text": "Hi there"}]}}]}


@pytest.fixture
def chat_ok():
    """Minimal successful chat/completions body."""
    return {"choices": [{"message": {"role": "assistant", "content": "Hello from chat"}}]}


@pytest.fixture(autouse=True)
def _no_provider_env(monkeypatch):
    """Tests never pick up real credentials from the environment."""
    for meta in PROVIDERS.values():
        monkeypatch.delenv(meta["env"], raising=False)
    for name in ("GEMINI_MODEL", "OPENAI_MODEL", "BLACKBOX_MODEL", "MULTIPROMPT_TIMEOUT", "MULTIPROMPT_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path):
    """Config with Gemini and OpenAI keys, logging into tmp_path."""
    return ComparatorConfig(
        gemini_api_key="gemini-test-key",
        openai_api_key="openai-test-key",
        log_dir=str(tmp_path / "logs"),
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that routes by URL fragment and records every request."""

    def __init__(self, routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]]):
        self.requests: list[httpx.Request] = []
        self._routes = routes
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for fragment, reply in self._routes.items():
            if fragment in str(request.url):
                return reply(request) if callable(reply) else reply
        return httpx.Response(404, json={"error": "no route"})


@pytest.fixture
def make_client():
    """Factory: routes -> (AsyncClient, RecordingTransport)."""

    def _make(routes):
        transport = RecordingTransport(routes)
        return httpx.AsyncClient(transport=transport), transport

    return _make
