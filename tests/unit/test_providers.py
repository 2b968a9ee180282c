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
"""Unit tests for provider adapters -- upstream HTTP is served by httpx.MockTransport."""

import json

import httpx
import pytest

from multiprompt.core.config import ComparatorConfig
from multiprompt.core.errors import (
    MissingCredentialError,
    UnsupportedProviderError,
    UpstreamHTTPError,
    UpstreamShapeError,
)
from multiprompt.core.providers import build_adapter, build_providers


class TestRegistry:
    def test_display_order_and_colors(self, config):
        adapters = build_providers(config)
        assert list(adapters) == ["gemini", "openai", "grok", "blackbox"]
        assert [a.name for a in adapters.values()] == ["Gemini", "ChatGPT", "Grok", "Blackbox"]
        assert [a.color for a in adapters.values()] == ["blue", "green", "indigo", "yellow"]

    def test_unknown_id_in_order_is_skipped(self):
        cfg = ComparatorConfig(provider_order=["gemini", "mystery"])
        assert list(build_providers(cfg)) == ["gemini"]

    def test_gemini_endpoint_uses_configured_model(self):
        cfg = ComparatorConfig(gemini_model="gemini-2.5-flash")
        adapter = build_adapter("gemini", cfg)
        assert adapter.endpoint.endswith("/models/gemini-2.5-flash:generateContent")

    def test_describe_never_leaks_credential(self, config):
        described = build_adapter("openai", config).describe()
        assert described["configured"] is True
        assert "openai-test-key" not in json.dumps(described)

    def test_grok_is_unsupported(self):
        assert build_adapter("grok", ComparatorConfig()).supported is False


class TestGeminiAdapter:
    @pytest.mark.asyncio
    async def test_success_extracts_text(self, config, make_client, gemini_ok):
        client, transport = make_client({"generateContent": httpx.Response(200, json=gemini_ok)})
        async with client:
            text = await build_adapter("gemini", config).send("Hello", client)

        assert text == "Hi there"
        sent = transport.requests[0]
        assert sent.method == "POST"
        assert sent.headers["x-goog-api-key"] == "gemini-test-key"
        assert json.loads(sent.content) == {"contents": [{"parts": [{"text": "Hello"}]}]}

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, make_client):
        client, transport = make_client({})
        async with client:
            with pytest.raises(MissingCredentialError, match="API key is missing"):
                await build_adapter("gemini", ComparatorConfig()).send("Hello", client)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_blank_key_counts_as_missing(self, make_client):
        client, _ = make_client({})
        async with client:
            with pytest.raises(MissingCredentialError):
                await build_adapter("gemini", ComparatorConfig(gemini_api_key="   ")).send("x", client)

    @pytest.mark.asyncio
    async def test_non_2xx_names_vendor_and_status(self, config, make_client):
        client, _ = make_client({"generateContent": httpx.Response(403)})
        async with client:
            with pytest.raises(UpstreamHTTPError) as exc:
                await build_adapter("gemini", config).send("Hello", client)

        assert exc.value.status_code == 403
        assert "Gemini" in exc.value.message
        assert "403 Forbidden" in exc.value.message

    @pytest.mark.asyncio
    async def test_empty_candidates_is_no_response(self, config, make_client):
        client, _ = make_client({"generateContent": httpx.Response(200, json={"candidates": []})})
        async with client:
            with pytest.raises(UpstreamShapeError, match="No response"):
                await build_adapter("gemini", config).send("Hello", client)

    @pytest.mark.asyncio
    async def test_non_json_body_is_no_response(self, config, make_client):
        client, _ = make_client({"generateContent": httpx.Response(200, text="<html>oops</html>")})
        async with client:
            with pytest.raises(UpstreamShapeError):
                await build_adapter("gemini", config).send("Hello", client)

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_error(self, config, make_client):
        def _refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client({"generateContent": _refuse})
        async with client:
            with pytest.raises(UpstreamHTTPError) as exc:
                await build_adapter("gemini", config).send("Hello", client)

        assert exc.value.status_code is None
        assert "request failed" in exc.value.message


class TestChatAdapters:
    @pytest.mark.asyncio
    async def test_openai_request_shape(self, config, make_client, chat_ok):
        client, transport = make_client({"api.openai.com": httpx.Response(200, json=chat_ok)})
        async with client:
            text = await build_adapter("openai", config).send("Hello", client)

        assert text == "Hello from chat"
        sent = transport.requests[0]
        assert str(sent.url) == "https://api.openai.com/v1/chat/completions"
        assert sent.headers["Authorization"] == "Bearer openai-test-key"
        body = json.loads(sent.content)
        assert body["model"] == "gpt-4o-mini"
        assert body["messages"] == [{"role": "user", "content": "Hello"}]

    @pytest.mark.asyncio
    async def test_blackbox_uses_its_own_endpoint(self, make_client, chat_ok):
        cfg = ComparatorConfig(blackbox_api_key="bb-key")
        client, transport = make_client({"api.blackbox.ai": httpx.Response(200, json=chat_ok)})
        async with client:
            text = await build_adapter("blackbox", cfg).send("Hello", client)

        assert text == "Hello from chat"
        assert str(transport.requests[0].url) == "https://api.blackbox.ai/chat/completions"

    @pytest.mark.asyncio
    async def test_null_content_is_no_response(self, config, make_client):
        reply = {"choices": [{"message": {"content": None}}]}
        client, _ = make_client({"api.openai.com": httpx.Response(200, json=reply)})
        async with client:
            with pytest.raises(UpstreamShapeError, match="No response from ChatGPT"):
                await build_adapter("openai", config).send("Hello", client)

    @pytest.mark.asyncio
    async def test_server_error_message(self, config, make_client):
        client, _ = make_client({"api.openai.com": httpx.Response(500)})
        async with client:
            with pytest.raises(UpstreamHTTPError, match="ChatGPT API error: 500 Internal Server Error"):
                await build_adapter("openai", config).send("Hello", client)


class TestGrokAdapter:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "xai-real-looking-key"])
    async def test_always_not_available(self, make_client, key):
        client, transport = make_client({})
        async with client:
            with pytest.raises(UnsupportedProviderError, match="not available"):
                await build_adapter("grok", ComparatorConfig(grok_api_key=key)).send("Hi", client)
        assert transport.requests == []
