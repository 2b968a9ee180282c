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
"""Multiprompt -- Comparison Routes.

Every provider call runs here on the server, so the browser never holds a
vendor credential. /api/providers reports only whether a key is configured.
"""

from fastapi import APIRouter, HTTPException, Request

from multiprompt.api._shared import CompareRequest, get_dispatcher, request_log
from multiprompt.core.errors import PromptValidationError

router = APIRouter()


@router.get("/api/providers")
async def list_providers(request: Request):
    """Providers in panel order, with display name and color."""
    dispatcher = get_dispatcher(request)
    return {"providers": [adapter.describe() for adapter in dispatcher.providers.values()]}


@router.post("/api/compare")
async def compare_endpoint(body: CompareRequest, request: Request):
    """Send one prompt to every provider and return the settled ResponseMap."""
    dispatcher = get_dispatcher(request)
    try:
        result = await dispatcher.dispatch(body.prompt, body.providers)
    except PromptValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log = request_log(request)
    if log and result.failed:
        log.warn("Compare", "Some providers failed", failed=",".join(result.failed))
    return result.to_dict()
