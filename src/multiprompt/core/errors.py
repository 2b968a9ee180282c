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
Multiprompt -- Error types

Two families:

    PromptValidationError / SubmissionInProgressError
        Raised before any network call. Front ends report these directly.

    ProviderError and subclasses
        One provider's failure. The dispatcher turns each of these into that
        provider's error entry; they never abort a batch.
"""

from __future__ import annotations


class ComparatorError(Exception):
    """Base class for every error raised by Multiprompt."""


class PromptValidationError(ComparatorError):
    """The prompt is empty or whitespace only."""


class SubmissionInProgressError(ComparatorError):
    """A batch is already in flight for this session."""


# =============================================================================
# PROVIDER ERRORS
# =============================================================================


class ProviderError(ComparatorError):
    """A single provider call failed."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
        self.message = message


class MissingCredentialError(ProviderError):
    """No API key configured for the provider."""


class UpstreamHTTPError(ProviderError):
    """Non-2xx response, or the request never got a response at all."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(provider, message)
        self.status_code = status_code


class UpstreamShapeError(ProviderError):
    """The vendor answered 2xx but the text field was not where expected."""


class UnsupportedProviderError(ProviderError):
    """The provider is listed but has no working adapter."""


class UnknownProviderError(ProviderError):
    """The requested provider identifier is not registered."""
