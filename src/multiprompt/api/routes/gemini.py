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
"""Multiprompt -- Gemini Proxy Route.

Server-side passthrough to Gemini using the server-held credential.
GET answers a fixed example prompt; POST reads ``{"prompt": ...}``.
No retry, caching or rate limiting.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from multiprompt.api._shared import PromptRequest, get_config, get_dispatcher, request_log
from multiprompt.core.dispatcher import EMPTY_PROMPT_MESSAGE
from multiprompt.core.errors import ProviderError
from multiprompt.core.providers import build_adapter, open_client

router = APIRouter()

EXAMPLE_PROMPT = "How to make a cupcake"
SUCCESS_MESSAGE = "GEMINI response sent"


def _payload(success: bool, message: str, res: str = "") -> dict:
    return {"success": success, "message": message, "res": res}


async def _proxy(request: Request, prompt: str):
    dispatcher = get_dispatcher(request)
    adapter = dispatcher.providers.get("gemini") or build_adapter("gemini", get_config(request))
    client = getattr(request.app.state, "http_client", None)

    try:
        if client is not None:
            text = await adapter.send(prompt, client)
        else:
            async with open_client(get_config(request)) as own_client:
                text = await adapter.send(prompt, own_client)
    except ProviderError as e:
        log = request_log(request)
        if log:
            log.error("Proxy", "Gemini call failed", error=e.message)
        return JSONResponse(status_code=502, content=_payload(False, e.message))

    return _payload(True, SUCCESS_MESSAGE, text)


@router.get("/api/ai/gemini")
async def gemini_example(request: Request):
    return await _proxy(request, EXAMPLE_PROMPT)


@router.post("/api/ai/gemini")
async def gemini_prompt(body: PromptRequest, request: Request):
    if not body.prompt.strip():
        return JSONResponse(status_code=400, content=_payload(False, EMPTY_PROMPT_MESSAGE))
    return await _proxy(request, body.prompt)
