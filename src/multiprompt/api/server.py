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
Multiprompt -- API Server

REST API and comparator page.

Run with: uvicorn --factory multiprompt.api.server:create_app --port 8000
    or:   multiprompt serve
"""

import time
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from multiprompt import __version__
from multiprompt.api._shared import _get_live_log
from multiprompt.core.config import ComparatorConfig, load_config
from multiprompt.core.dispatcher import PromptDispatcher
from multiprompt.core.providers import ProviderAdapter

logger = logging.getLogger("multiprompt.api.server")


# =============================================================================
# HTTP REQUEST LOGGING MIDDLEWARE
# =============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, and latency."""
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        latency_ms = int((time.time() - start) * 1000)
        log = getattr(request.app.state, "live_log", None)
        if log:
            # Skip noisy probes
            path = request.url.path
            if path not in ("/health", "/ready"):
                log.http_request(
                    method=request.method,
                    path=path,
                    status=response.status_code,
                    latency_ms=latency_ms,
                )
        return response


# =============================================================================
# APP FACTORY
# =============================================================================

def create_app(
    config: Optional[ComparatorConfig] = None,
    providers: Optional[dict[str, ProviderAdapter]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    live_log: bool = True,
) -> FastAPI:
    """Build the FastAPI app around one explicit configuration.

    Args:
        config: Comparator configuration (loaded from file + env when omitted).
        providers: Adapter registry override.
        http_client: Shared client for upstream calls; one per request if None.
        live_log: Write to the rotating live log.
    """
    from multiprompt.api.routes.compare import router as compare_router
    from multiprompt.api.routes.gemini import router as gemini_router
    from multiprompt.api.routes.health import router as health_router
    from multiprompt.api.routes.ui import router as ui_router

    config = config or load_config()
    log = _get_live_log(config.log_dir) if live_log else None

    app = FastAPI(
        title="Multiprompt API",
        description="Send one prompt to several AI providers and compare the answers",
        version=__version__,
    )
    app.state.config = config
    app.state.live_log = log
    app.state.http_client = http_client
    app.state.dispatcher = PromptDispatcher(
        config, providers=providers, client=http_client, log=log
    )

    # CORS for local front ends
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1):\d+",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(ui_router)
    app.include_router(health_router)
    app.include_router(compare_router)
    app.include_router(gemini_router)

    @app.on_event("startup")
    async def _on_startup():
        missing = [
            p for p in app.state.dispatcher.provider_ids
            if not config.credential_for(p)
        ]
        if missing:
            logger.info("No API key for: %s", ", ".join(missing))
        if log:
            log.server_start(version=__version__, providers=len(app.state.dispatcher.providers))

    @app.on_event("shutdown")
    async def _on_shutdown():
        if log:
            log.server_stop()

    return app


def run(host: str = "127.0.0.1", port: int = 8000, config: Optional[ComparatorConfig] = None):
    """Serve the app with uvicorn."""
    import uvicorn

    app = create_app(config)
    if app.state.live_log:
        app.state.live_log.info("Server", "Starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_level="info")

