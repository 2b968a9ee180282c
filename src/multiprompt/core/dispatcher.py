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
Multiprompt -- Prompt Dispatcher

Fans one prompt out to every configured provider and joins with an
all-settled combinator: the batch completes only when every call has either
produced text or failed, and one provider's failure never suppresses
another's result.

    dispatcher = PromptDispatcher(load_config())
    result = await dispatcher.dispatch("Hello")
    result.responses   # {"gemini": "Hi there", "openai": "❌ Error: ...", ...}
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx

from multiprompt.core.config import ComparatorConfig
from multiprompt.core.errors import PromptValidationError, ProviderError, UnknownProviderError
from multiprompt.core.providers import ProviderAdapter, build_providers, open_client

logger = logging.getLogger("multiprompt.core.dispatcher")

ERROR_PREFIX = "❌ Error: "
EMPTY_PROMPT_MESSAGE = "Please enter a prompt."


def validate_prompt(prompt: str | None) -> str:
    """Return the prompt unchanged, or raise if it has no visible text."""
    if prompt is None or not prompt.strip():
        raise PromptValidationError(EMPTY_PROMPT_MESSAGE)
    return prompt


# =============================================================================
# ALL-SETTLED JOIN
# =============================================================================


@dataclass
class Settled:
    """Outcome of one awaitable: a value or the exception it raised."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(awaitables: Iterable[Awaitable[Any]]) -> list[Settled]:
    """Run awaitables concurrently; return one Settled per input, in order.

    Never raises on behalf of a child and never returns before the last
    child finishes.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    return [
        Settled(error=r) if isinstance(r, BaseException) else Settled(value=r)
        for r in results
    ]


# =============================================================================
# RESULTS
# =============================================================================


@dataclass
class ProviderOutcome:
    """One provider's settled result."""

    provider: str
    ok: bool
    text: str = ""
    error: str = ""
    latency_ms: int = 0

    @property
    def display_text(self) -> str:
        return self.text if self.ok else f"{ERROR_PREFIX}{self.error}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DispatchResult:
    """A fully settled batch."""

    prompt: str
    outcomes: list[ProviderOutcome] = field(default_factory=list)

    @property
    def responses(self) -> dict[str, str]:
        """ResponseMap: provider id -> text or error string."""
        return {o.provider: o.display_text for o in self.outcomes}

    @property
    def failed(self) -> list[str]:
        return [o.provider for o in self.outcomes if not o.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "responses": self.responses,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


# =============================================================================
# DISPATCHER
# =============================================================================


class PromptDispatcher:
    """Sends one prompt to many providers concurrently.

    Args:
        config: Credentials and transport settings.
        providers: Adapter registry; built from ``config`` when omitted.
        client: Shared httpx client. When omitted, one is opened and closed
            per dispatch.
        log: Optional ComparatorLogger for per-call and per-batch events.
    """

    def __init__(
        self,
        config: ComparatorConfig,
        providers: dict[str, ProviderAdapter] | None = None,
        client: httpx.AsyncClient | None = None,
        log: Any = None,
    ):
        self.config = config
        self.providers = providers if providers is not None else build_providers(config)
        # Unknown ids in the configured order still get an error entry per batch.
        self._default_targets = list(providers) if providers is not None else list(config.provider_order)
        self._client = client
        self._log = log

    @property
    def provider_ids(self) -> list[str]:
        return list(dict.fromkeys(self._default_targets))

    @contextlib.asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with open_client(self.config) as client:
            yield client

    async def _run_one(
        self, provider_id: str, prompt: str, client: httpx.AsyncClient
    ) -> ProviderOutcome:
        start = time.monotonic()
        try:
            adapter = self.providers.get(provider_id)
            if adapter is None:
                raise UnknownProviderError(provider_id, f"Unknown provider: {provider_id}")
            text = await adapter.send(prompt, client)
        except ProviderError as e:
            return ProviderOutcome(
                provider=provider_id,
                ok=False,
                error=e.message,
                latency_ms=int((time.monotonic() - start) * 1000),
            )
        return ProviderOutcome(
            provider=provider_id,
            ok=True,
            text=text,
            latency_ms=int((time.monotonic() - start) * 1000),
        )

    async def dispatch(
        self, prompt: str, provider_ids: Iterable[str] | None = None
    ) -> DispatchResult:
        """Send ``prompt`` to every requested provider and wait for all of them.

        Raises:
            PromptValidationError: prompt is empty or whitespace only.
                No network call is made.
        """
        validate_prompt(prompt)
        targets = list(dict.fromkeys(provider_ids)) if provider_ids is not None else self.provider_ids

        logger.info("Dispatching to %d provider(s) (prompt=%d chars)", len(targets), len(prompt))
        start = time.monotonic()

        if targets:
            async with self._client_scope() as client:
                settled = await settle_all(self._run_one(pid, prompt, client) for pid in targets)
        else:
            settled = []

        outcomes: list[ProviderOutcome] = []
        for provider_id, item in zip(targets, settled):
            if item.ok:
                outcome = item.value
            else:
                # Not a ProviderError: a bug or an unexpected transport failure.
                logger.error(
                    "Provider %s raised %s: %s",
                    provider_id,
                    type(item.error).__name__,
                    item.error,
                )
                outcome = ProviderOutcome(
                    provider=provider_id,
                    ok=False,
                    error=str(item.error) or type(item.error).__name__,
                )
            outcomes.append(outcome)
            if self._log:
                self._log.provider_call(
                    provider_id, ok=outcome.ok, latency_ms=outcome.latency_ms, error=outcome.error
                )

        result = DispatchResult(prompt=prompt, outcomes=outcomes)
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Batch settled: %d ok, %d failed in %d ms",
            len(outcomes) - len(result.failed),
            len(result.failed),
            latency_ms,
        )
        if self._log:
            self._log.dispatch(
                providers=len(outcomes), failed=len(result.failed), latency_ms=latency_ms
            )
        return result
