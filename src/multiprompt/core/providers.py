# Multiprompt
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Multiprompt.
#
# Multiprompt is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
#    You may use, modify, and distribute this file under AGPL-3.0.
#    See LICENSE for the full text.
#
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#    For proprietary use, SaaS deployment, or enterprise licensing.
#    See LICENSE-ENTERPRISE.md or contact info@phoenixlink.co.za
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
Multiprompt -- Provider Adapters

Every vendor is one ProviderAdapter: a row of data (endpoint, header builder,
body builder, response extractor) behind the same ``send(prompt, client)``.
Adding a provider means adding a row to ``_ADAPTER_SPECS``; the dispatcher
never branches on provider identity.

Supports: Gemini (generateContent), OpenAI chat/completions,
          Blackbox chat/completions. Grok is listed but has no adapter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from multiprompt.core.config import PROVIDERS, ComparatorConfig
from multiprompt.core.errors import (
    MissingCredentialError,
    UnsupportedProviderError,
    UpstreamHTTPError,
    UpstreamShapeError,
)

logger = logging.getLogger("multiprompt.core.providers")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
OPENAI_BASE_URL = "https://api.openai.com/v1"
BLACKBOX_BASE_URL = "https://api.blackbox.ai"


# ── Request / response shapes ────────────────────────────────────────────


def _dig(data: Any, *path: str | int) -> Any:
    """Follow a key/index path; None as soon as a step is missing."""
    node = data
    for step in path:
        try:
            node = node[step]
        except (KeyError, IndexError, TypeError):
            return None
    return node


def _bearer_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def _gemini_headers(api_key: str) -> dict[str, str]:
    return {"x-goog-api-key": api_key, "Content-Type": "application/json"}


def _gemini_body(prompt: str, model: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def _chat_body(prompt: str, model: str) -> dict[str, Any]:
    return {"model": model, "messages": [{"role": "user", "content": prompt}]}


def _gemini_text(data: Any) -> str | None:
    return _dig(data, "candidates", 0, "content", "parts", 0, "text")


def _chat_text(data: Any) -> str | None:
    return _dig(data, "choices", 0, "message", "content")


# ── Adapter ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProviderAdapter:
    """One vendor's endpoint, auth, request shape and response shape."""

    id: str
    name: str
    color: str
    endpoint: str = ""
    model: str = ""
    credential: str = ""
    build_headers: Callable[[str], dict[str, str]] | None = None
    build_body: Callable[[str, str], dict[str, Any]] | None = None
    extract_text: Callable[[Any], str | None] | None = None
    unavailable_reason: str = ""

    @property
    def supported(self) -> bool:
        return not self.unavailable_reason

    @property
    def configured(self) -> bool:
        return bool(self.credential)

    def describe(self) -> dict[str, Any]:
        """Public description for the UI. Never includes the credential."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "configured": self.configured,
            "supported": self.supported,
        }

    async def send(self, prompt: str, client: httpx.AsyncClient) -> str:
        """Call the vendor and return the generated text.

        Raises:
            UnsupportedProviderError: no adapter exists for this vendor
            MissingCredentialError: no API key configured
            UpstreamHTTPError: transport failure or non-2xx status
            UpstreamShapeError: 2xx but no text at the expected path
        """
        if not self.supported:
            raise UnsupportedProviderError(self.id, self.unavailable_reason)
        if not self.credential:
            raise MissingCredentialError(self.id, f"{self.name} API key is missing.")

        try:
            resp = await client.post(
                self.endpoint,
                headers=self.build_headers(self.credential),
                json=self.build_body(prompt, self.model),
            )
        except httpx.HTTPError as e:
            raise UpstreamHTTPError(self.id, f"{self.name} request failed: {e}") from e

        if not resp.is_success:
            raise UpstreamHTTPError(
                self.id,
                f"{self.name} API error: {resp.status_code} {resp.reason_phrase}".rstrip(),
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError:
            data = None
        text = self.extract_text(data)
        if not isinstance(text, str) or not text:
            raise UpstreamShapeError(self.id, f"No response from {self.name}.")
        return text


# ── Registry ─────────────────────────────────────────────────────────────

_ADAPTER_SPECS: dict[str, dict[str, Any]] = {
    "gemini": {
        "endpoint": GEMINI_BASE_URL + "/{model}:generateContent",
        "build_headers": _gemini_headers,
        "build_body": _gemini_body,
        "extract_text": _gemini_text,
    },
    "openai": {
        "endpoint": OPENAI_BASE_URL + "/chat/completions",
        "build_headers": _bearer_headers,
        "build_body": _chat_body,
        "extract_text": _chat_text,
    },
    "grok": {
        "unavailable_reason": "Grok API not available yet.",
    },
    "blackbox": {
        "endpoint": BLACKBOX_BASE_URL + "/chat/completions",
        "build_headers": _bearer_headers,
        "build_body": _chat_body,
        "extract_text": _chat_text,
    },
}


def build_adapter(provider: str, config: ComparatorConfig) -> ProviderAdapter:
    """Build one adapter from the catalog and the config's credential/model."""
    meta = PROVIDERS[provider]
    spec = dict(_ADAPTER_SPECS[provider])
    model = config.model_for(provider)
    if spec.get("endpoint"):
        spec["endpoint"] = spec["endpoint"].format(model=model)
    return ProviderAdapter(
        id=provider,
        name=meta["name"],
        color=meta["color"],
        model=model,
        credential=config.credential_for(provider),
        **spec,
    )


def build_providers(config: ComparatorConfig) -> dict[str, ProviderAdapter]:
    """Adapters for every known provider in the config's display order."""
    adapters: dict[str, ProviderAdapter] = {}
    for provider in config.provider_order:
        if provider in _ADAPTER_SPECS and provider not in adapters:
            adapters[provider] = build_adapter(provider, config)
        elif provider not in _ADAPTER_SPECS:
            logger.warning("No adapter for provider %r -- it will report as unknown", provider)
    return adapters


def open_client(config: ComparatorConfig, **kwargs: Any) -> httpx.AsyncClient:
    """Shared async client for one batch of provider calls."""
    return httpx.AsyncClient(timeout=config.request_timeout, **kwargs)
