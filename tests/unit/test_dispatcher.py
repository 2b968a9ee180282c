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
"""Unit tests for the prompt dispatcher and the all-settled join."""

import asyncio

import httpx
import pytest

from multiprompt.core.config import ComparatorConfig
from multiprompt.core.dispatcher import (
    ERROR_PREFIX,
    PromptDispatcher,
    ProviderOutcome,
    settle_all,
)
from multiprompt.core.errors import PromptValidationError, UpstreamHTTPError


class FakeAdapter:
    """Adapter stand-in with scripted behavior."""

    def __init__(self, provider_id, reply=None, error=None, wait_for=None, started=None):
        self.id = provider_id
        self.reply = reply
        self.error = error
        self.wait_for = wait_for
        self.started = started
        self.calls = []

    async def send(self, prompt, client):
        self.calls.append(prompt)
        if self.started is not None:
            self.started.set()
        if self.wait_for is not None:
            await asyncio.wait_for(self.wait_for.wait(), timeout=2)
        if self.error is not None:
            raise self.error
        return self.reply


class TestSettleAll:
    @pytest.mark.asyncio
    async def test_keeps_input_order_and_isolates_failures(self):
        async def ok(value, delay):
            await asyncio.sleep(delay)
            return value

        async def boom():
            raise ValueError("bad")

        results = await settle_all([ok("slow", 0.05), boom(), ok("fast", 0)])

        assert [r.ok for r in results] == [True, False, True]
        assert results[0].value == "slow"
        assert isinstance(results[1].error, ValueError)
        assert results[2].value == "fast"

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await settle_all([]) == []


class TestDispatch:
    @pytest.mark.asyncio
    async def test_gemini_example_and_missing_openai_key(self, make_client, gemini_ok):
        cfg = ComparatorConfig(gemini_api_key="gemini-test-key")
        client, transport = make_client({"generateContent": httpx.Response(200, json=gemini_ok)})
        async with client:
            result = await PromptDispatcher(cfg, client=client).dispatch("Hello")

        responses = result.responses
        assert responses["gemini"] == "Hi there"
        assert responses["openai"] == ERROR_PREFIX + "ChatGPT API key is missing."
        assert "not available" in responses["grok"]
        assert "API key is missing" in responses["blackbox"]
        # Only Gemini had a key, so only Gemini went over the wire
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_one_entry_per_provider(self, make_client, gemini_ok, chat_ok):
        cfg = ComparatorConfig(
            gemini_api_key="g", openai_api_key="o", grok_api_key="x", blackbox_api_key="b"
        )
        client, _ = make_client(
            {
                "generateContent": httpx.Response(200, json=gemini_ok),
                "api.openai.com": httpx.Response(200, json=chat_ok),
                "api.blackbox.ai": httpx.Response(502),
            }
        )
        async with client:
            result = await PromptDispatcher(cfg, client=client).dispatch("Hello")

        assert set(result.responses) == {"gemini", "openai", "grok", "blackbox"}
        assert len(result.outcomes) == 4
        assert result.failed == ["grok", "blackbox"]
        assert result.responses["blackbox"] == ERROR_PREFIX + "Blackbox API error: 502 Bad Gateway"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t", None])
    async def test_empty_prompt_makes_no_calls(self, config, make_client, prompt):
        client, transport = make_client({})
        async with client:
            with pytest.raises(PromptValidationError, match="Please enter a prompt"):
                await PromptDispatcher(config, client=client).dispatch(prompt)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_failure_isolation(self, config):
        providers = {
            "a": FakeAdapter("a", error=UpstreamHTTPError("a", "A API error: 500")),
            "b": FakeAdapter("b", reply="B says hi"),
        }
        result = await PromptDispatcher(config, providers=providers).dispatch("Hello")

        assert result.responses == {"a": ERROR_PREFIX + "A API error: 500", "b": "B says hi"}

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_isolated(self, config):
        providers = {
            "buggy": FakeAdapter("buggy", error=RuntimeError("adapter bug")),
            "fine": FakeAdapter("fine", reply="ok"),
        }
        result = await PromptDispatcher(config, providers=providers).dispatch("Hello")

        assert result.responses["fine"] == "ok"
        assert result.responses["buggy"] == ERROR_PREFIX + "adapter bug"

    @pytest.mark.asyncio
    async def test_unknown_provider_id(self, config):
        providers = {"fine": FakeAdapter("fine", reply="ok")}
        result = await PromptDispatcher(config, providers=providers).dispatch(
            "Hello", ["fine", "nope"]
        )

        assert result.responses["fine"] == "ok"
        assert result.responses["nope"] == ERROR_PREFIX + "Unknown provider: nope"

    @pytest.mark.asyncio
    async def test_subset_and_duplicates(self, config):
        a = FakeAdapter("a", reply="A")
        b = FakeAdapter("b", reply="B")
        result = await PromptDispatcher(config, providers={"a": a, "b": b}).dispatch(
            "Hello", ["b", "b"]
        )

        assert list(result.responses) == ["b"]
        assert a.calls == []
        assert b.calls == ["Hello"]

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self, config):
        # "slow" cannot finish until "fast" has started: a sequential
        # dispatcher would time out here.
        fast_started = asyncio.Event()
        providers = {
            "slow": FakeAdapter("slow", reply="S", wait_for=fast_started),
            "fast": FakeAdapter("fast", reply="F", started=fast_started),
        }
        result = await PromptDispatcher(config, providers=providers).dispatch("Hello")

        assert result.responses == {"slow": "S", "fast": "F"}

    @pytest.mark.asyncio
    async def test_prompt_passed_through_unchanged(self, config):
        adapter = FakeAdapter("a", reply="ok")
        await PromptDispatcher(config, providers={"a": adapter}).dispatch("  padded  ")
        assert adapter.calls == ["  padded  "]

    @pytest.mark.asyncio
    async def test_live_log_receives_events(self, config):
        events = []

        class _Log:
            def provider_call(self, provider, **fields):
                events.append(("call", provider, fields["ok"]))

            def dispatch(self, **fields):
                events.append(("batch", fields["providers"], fields["failed"]))

        providers = {
            "a": FakeAdapter("a", reply="A"),
            "b": FakeAdapter("b", error=UpstreamHTTPError("b", "down")),
        }
        await PromptDispatcher(config, providers=providers, log=_Log()).dispatch("Hello")

        assert events == [("call", "a", True), ("call", "b", False), ("batch", 2, 1)]


class TestOutcome:
    def test_display_text(self):
        assert ProviderOutcome("a", ok=True, text="hi").display_text == "hi"
        assert ProviderOutcome("a", ok=False, error="down").display_text == "❌ Error: down"

    def test_to_dict(self):
        data = ProviderOutcome("a", ok=True, text="hi", latency_ms=5).to_dict()
        assert data == {"provider": "a", "ok": True, "text": "hi", "error": "", "latency_ms": 5}


class TestDefaultTargets:
    @pytest.mark.asyncio
    async def test_unknown_id_in_config_order_gets_entry(self):
        cfg = ComparatorConfig(provider_order=["grok", "claude"])
        result = await PromptDispatcher(cfg).dispatch("Hello")

        assert list(result.responses) == ["grok", "claude"]
        assert result.responses["claude"] == ERROR_PREFIX + "Unknown provider: claude"
