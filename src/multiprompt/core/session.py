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
Multiprompt -- Comparison Session

State behind the comparator page: the current prompt, the loading flag and
the ResponseMap. The map is written at exactly two points: cleared when a
submission is accepted, and replaced in full when the batch settles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from multiprompt.core.dispatcher import DispatchResult, PromptDispatcher, validate_prompt
from multiprompt.core.errors import SubmissionInProgressError

logger = logging.getLogger("multiprompt.core.session")

WAITING_TEXT = "⌛ Waiting for input..."
LOADING_TEXT = "Thinking..."


@dataclass
class SessionState:
    prompt: str = ""
    loading: bool = False
    responses: dict[str, str] = field(default_factory=dict)


class ComparisonSession:
    """One user's view of the comparator."""

    def __init__(self, dispatcher: PromptDispatcher):
        self.dispatcher = dispatcher
        self.state = SessionState()
        self.last_result: DispatchResult | None = None

    @property
    def busy(self) -> bool:
        return self.state.loading

    async def submit(self, prompt: str) -> dict[str, str]:
        """Run one batch and commit its ResponseMap.

        Raises:
            PromptValidationError: empty prompt; state is left untouched.
            SubmissionInProgressError: a batch is already in flight.
        """
        validate_prompt(prompt)
        if self.state.loading:
            raise SubmissionInProgressError("A comparison is already running.")

        logger.debug("Submitting prompt (%d chars)", len(prompt))
        self.state.prompt = prompt
        self.state.responses = {}
        self.state.loading = True
        try:
            result = await self.dispatcher.dispatch(prompt)
        finally:
            self.state.loading = False

        self.last_result = result
        self.state.responses = result.responses
        return self.state.responses

    def panel_text(self, provider_id: str) -> str:
        """What the provider's panel shows right now."""
        if self.state.loading and provider_id not in self.state.responses:
            return LOADING_TEXT
        return self.state.responses.get(provider_id) or WAITING_TEXT
