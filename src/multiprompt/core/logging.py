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
Multiprompt -- Live Logger

Every dispatch, provider call and HTTP request is written to a rotating log
file that can be tailed while the comparator runs.

LOG LOCATION:
    ~/.multiprompt/logs/multiprompt.log        (current)
    ~/.multiprompt/logs/multiprompt.log.1      (previous rotation)

RULES:
    - Max 10 MB per file, 20 rotated files kept
    - Human-readable format with structured key=value fields
    - WARNING and above mirrored to stderr
    - Credentials are never passed as fields

USAGE:
    from multiprompt.core.logging import get_logger
    log = get_logger()
    log.provider_call("gemini", ok=True, latency_ms=812)
    log.dispatch(providers=4, failed=1, latency_ms=1530)
    log.error("Proxy", "Gemini call failed", error=str(e))
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from multiprompt.core.config import DEFAULT_LOG_DIR

# =============================================================================
# CONSTANTS
# =============================================================================

MAX_LOG_FILE_BYTES = 10 * 1024 * 1024  # 10 MB per file
LOG_BACKUP_COUNT = 20
LOG_FILE_NAME = "multiprompt.log"


# =============================================================================
# FORMATTER
# =============================================================================


class ComparatorLogFormatter(logging.Formatter):
    """
    Format: TIMESTAMP | LEVEL | COMPONENT | MESSAGE | {structured fields}

    Example:
    2026-02-09T17:30:45.123Z | PROV  | Dispatcher   | gemini ok | provider="gemini" ok=True latency_ms=812
    2026-02-09T17:30:46.500Z | BATCH | Dispatcher   | Batch settled | providers=4 failed=1
    """

    LEVEL_WIDTH = 5
    COMPONENT_WIDTH = 12

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        ts = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

        level = getattr(record, "mp_level", record.levelname)
        component = getattr(record, "component", "System")
        message = record.getMessage()

        fields = getattr(record, "fields", {})
        field_str = ""
        if fields:
            parts = []
            for k, v in fields.items():
                if isinstance(v, str):
                    parts.append(f'{k}="{v}"')
                elif isinstance(v, float):
                    parts.append(f"{k}={v:.3f}")
                else:
                    parts.append(f"{k}={v}")
            field_str = " | " + " ".join(parts)

        return (
            f"{ts} | {level:<{self.LEVEL_WIDTH}} | "
            f"{component:<{self.COMPONENT_WIDTH}} | {message}{field_str}"
        )


# =============================================================================
# LOGGER
# =============================================================================


class ComparatorLogger:
    """Component-tagged logger writing to ``<log_dir>/multiprompt.log``."""

    def __init__(self, log_dir: str | Path | None = None):
        self._log_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._log_file = self._log_dir / LOG_FILE_NAME

        self._logger = logging.getLogger("multiprompt.live")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        # Remove existing handlers to avoid duplicates
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        file_handler = logging.handlers.RotatingFileHandler(
            str(self._log_file),
            maxBytes=MAX_LOG_FILE_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(ComparatorLogFormatter())
        self._logger.addHandler(file_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.WARNING)
        stderr_handler.setFormatter(ComparatorLogFormatter())
        self._logger.addHandler(stderr_handler)

        self._session_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        self._request_count = 0
        self._batch_count = 0

        self.info("System", "Logger initialized", log_file=str(self._log_file))

    def _log(self, level: int, mp_level: str, component: str, message: str, **fields):
        """Core log method."""
        fields["session"] = self._session_id
        record = self._logger.makeRecord(
            name="multiprompt.live",
            level=level,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=None,
        )
        record.component = component
        record.mp_level = mp_level
        record.fields = fields
        self._logger.handle(record)

    # =========================================================================
    # Standard levels
    # =========================================================================

    def info(self, component: str, message: str, **fields):
        self._log(logging.INFO, "INFO", component, message, **fields)

    def warn(self, component: str, message: str, **fields):
        self._log(logging.WARNING, "WARN", component, message, **fields)

    def error(self, component: str, message: str, **fields):
        self._log(logging.ERROR, "ERROR", component, message, **fields)

    def debug(self, component: str, message: str, **fields):
        self._log(logging.DEBUG, "DEBUG", component, message, **fields)

    # =========================================================================
    # Domain events
    # =========================================================================

    def provider_call(
        self,
        provider: str,
        ok: bool = True,
        latency_ms: int = 0,
        error: str = "",
        **fields,
    ):
        """Log one provider call after it settled."""
        fields.update(provider=provider, ok=ok, latency_ms=latency_ms)
        if error:
            fields["error"] = error[:200]
        level = "PROV" if ok else "PROV!"
        message = f"{provider} {'ok' if ok else 'failed'}"
        self._log(logging.INFO, level, "Dispatcher", message, **fields)

    def dispatch(self, providers: int = 0, failed: int = 0, latency_ms: int = 0, **fields):
        """Log a settled batch."""
        fields.update(providers=providers, failed=failed, latency_ms=latency_ms)
        self._batch_count += 1
        self._log(logging.INFO, "BATCH", "Dispatcher", "Batch settled", **fields)

    def server_start(self, host: str = "", port: int = 0, **fields):
        fields.update(host=host, port=port)
        self._log(logging.INFO, "BOOT", "Server", "API server started", **fields)

    def server_stop(self, **fields):
        fields.update(requests_served=self._request_count, batches=self._batch_count)
        self._log(logging.INFO, "HALT", "Server", "API server stopped", **fields)

    def http_request(
        self, method: str, path: str, status: int = 200, latency_ms: int = 0, **fields
    ):
        """Log an HTTP request."""
        fields.update(method=method, path=path, status=status, latency_ms=latency_ms)
        level = logging.INFO if status < 400 else logging.WARNING
        self._log(level, "HTTP", "Server", f"{method} {path} -> {status}", **fields)
        self._request_count += 1

    # =========================================================================
    # UTILITY
    # =========================================================================

    @property
    def log_file(self) -> str:
        return str(self._log_file)

    @property
    def log_dir(self) -> str:
        return str(self._log_dir)

    def get_log_stats(self) -> dict[str, Any]:
        """Statistics about the log folder."""
        try:
            log_files = [f for f in self._log_dir.iterdir() if f.is_file()]
            total_size = sum(f.stat().st_size for f in log_files)
        except OSError:
            return {"log_file": self.log_file, "error": "could not stat"}
        return {
            "log_file": self.log_file,
            "file_count": len(log_files),
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "session_id": self._session_id,
            "requests_logged": self._request_count,
            "batches_logged": self._batch_count,
        }


# =============================================================================
# SINGLETON
# =============================================================================

_logger_instance: ComparatorLogger | None = None


def get_logger(log_dir: str | Path | None = None) -> ComparatorLogger:
    """Get or create the global ComparatorLogger.

    ``log_dir`` only takes effect on the first call.
    """
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ComparatorLogger(log_dir=log_dir)
    return _logger_instance
