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
Multiprompt -- Shared API Utilities

Pydantic request models and app-state accessors shared by all route modules.
"""

import logging
from typing import List, Optional

from fastapi import Request
from pydantic import BaseModel

from multiprompt.core.config import ComparatorConfig
from multiprompt.core.dispatcher import PromptDispatcher

logger = logging.getLogger("multiprompt.api.server")


# =============================================================================
# LIVE LOGGER
# =============================================================================

_live_log = None


def _get_live_log(log_dir: Optional[str] = None):
    """Lazy-init the ComparatorLogger. None if the log dir is not writable."""
    global _live_log
    if _live_log is None:
        try:
            from multiprompt.core.logging import get_logger
            _live_log = get_logger(log_dir=log_dir)
        except OSError as e:
            logger.warning("Live log unavailable: %s", e)
    return _live_log


def request_log(request: Request):
    """The app's live logger, or None when disabled."""
    return getattr(request.app.state, "live_log", None)


# =============================================================================
# APP STATE
# =============================================================================

def get_config(request: Request) -> ComparatorConfig:
    return request.app.state.config


def get_dispatcher(request: Request) -> PromptDispatcher:
    return request.app.state.dispatcher


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class PromptRequest(BaseModel):
    prompt: str = ""


class CompareRequest(BaseModel):
    prompt: str = ""
    providers: Optional[List[str]] = None
