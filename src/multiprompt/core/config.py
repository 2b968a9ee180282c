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
Multiprompt -- Configuration

One explicit configuration object, passed into the dispatcher, the API app
factory and the CLI. Nothing reads credentials from module-level state.

Sources, lowest to highest precedence:
  1. Dataclass defaults
  2. ~/.multiprompt/config.yaml   (optional)
  3. Environment variables         (GEMINI_API_KEY, OPENAI_API_KEY, ...)

A missing credential is NOT a startup error: that provider's panel simply
reports "API key is missing." at dispatch time.

Config file example::

    credentials:
      gemini: "AIza..."
      openai: "sk-..."
    models:
      gemini: gemini-2.0-flash
      openai: gpt-4o-mini
    request_timeout: 120
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("multiprompt.core.config")

_MULTIPROMPT_HOME = Path(os.environ.get("MULTIPROMPT_HOME", Path.home() / ".multiprompt"))
DEFAULT_CONFIG_PATH = _MULTIPROMPT_HOME / "config.yaml"
DEFAULT_LOG_DIR = _MULTIPROMPT_HOME / "logs"


# =============================================================================
# PROVIDER CATALOG
# =============================================================================

# Display order is the order panels appear in.
PROVIDERS: dict[str, dict[str, str]] = {
    "gemini": {"name": "Gemini", "color": "blue", "env": "GEMINI_API_KEY"},
    "openai": {"name": "ChatGPT", "color": "green", "env": "OPENAI_API_KEY"},
    "grok": {"name": "Grok", "color": "indigo", "env": "GROK_API_KEY"},
    "blackbox": {"name": "Blackbox", "color": "yellow", "env": "BLACKBOX_API_KEY"},
}

DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
    "blackbox": "blackboxai/openai/gpt-4o-mini",
}

# Environment overrides for non-credential settings
_ENV_OVERRIDES: dict[str, str] = {
    "gemini_model": "GEMINI_MODEL",
    "openai_model": "OPENAI_MODEL",
    "blackbox_model": "BLACKBOX_MODEL",
    "request_timeout": "MULTIPROMPT_TIMEOUT",
    "log_dir": "MULTIPROMPT_LOG_DIR",
}


@dataclass
class ComparatorConfig:
    """Credentials, model names and transport settings for one comparator."""

    gemini_api_key: str = ""
    openai_api_key: str = ""
    grok_api_key: str = ""
    blackbox_api_key: str = ""

    gemini_model: str = DEFAULT_MODELS["gemini"]
    openai_model: str = DEFAULT_MODELS["openai"]
    blackbox_model: str = DEFAULT_MODELS["blackbox"]

    # Seconds. Applied to the shared httpx client; not a per-provider budget.
    request_timeout: float = 120.0
    log_dir: str = str(DEFAULT_LOG_DIR)

    provider_order: list[str] = field(default_factory=lambda: list(PROVIDERS))

    def credential_for(self, provider: str) -> str:
        """Return the API key for a provider ("" when unset or unknown)."""
        return (getattr(self, f"{provider}_api_key", "") or "").strip()

    def model_for(self, provider: str) -> str:
        return getattr(self, f"{provider}_model", "") or DEFAULT_MODELS.get(provider, "")

    def configured_providers(self) -> list[str]:
        """Providers with a non-empty credential, in display order."""
        return [p for p in self.provider_order if self.credential_for(p)]

    @classmethod
    def from_env(cls, base: ComparatorConfig | None = None) -> ComparatorConfig:
        """Overlay environment variables on ``base`` (or on the defaults)."""
        config = base or cls()
        for provider, meta in PROVIDERS.items():
            value = os.environ.get(meta["env"])
            if value:
                setattr(config, f"{provider}_api_key", value.strip())
        for attr, env_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if not value:
                continue
            if attr == "request_timeout":
                try:
                    config.request_timeout = float(value)
                except ValueError:
                    logger.warning("Ignoring non-numeric %s=%r", env_name, value)
            else:
                setattr(config, attr, value)
        return config


# =============================================================================
# LOAD
# =============================================================================


def load_config(path: Path | str | None = None, use_env: bool = True) -> ComparatorConfig:
    """Load configuration from YAML, then apply environment overrides.

    If the file does not exist or cannot be parsed, defaults are used.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    config = ComparatorConfig()

    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                config = _parse_config(raw)
            elif raw is not None:
                logger.warning("Invalid config at %s (not a mapping) -- using defaults", config_path)
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load config %s: %s -- using defaults", config_path, exc)
    else:
        logger.debug("No config file at %s -- using defaults", config_path)

    if use_env:
        config = ComparatorConfig.from_env(config)
    return config


def _parse_config(raw: dict[str, Any]) -> ComparatorConfig:
    """Parse raw YAML dict into ComparatorConfig."""
    config = ComparatorConfig()

    credentials = raw.get("credentials") or {}
    if isinstance(credentials, dict):
        for provider, key in credentials.items():
            if provider in PROVIDERS and key:
                setattr(config, f"{provider}_api_key", str(key).strip())
            elif provider not in PROVIDERS:
                logger.warning("Unknown provider in credentials: %s", provider)

    models = raw.get("models") or {}
    if isinstance(models, dict):
        for provider, model in models.items():
            if provider in DEFAULT_MODELS and model:
                setattr(config, f"{provider}_model", str(model))

    if "request_timeout" in raw:
        try:
            config.request_timeout = float(raw["request_timeout"])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid request_timeout: %r", raw["request_timeout"])

    if raw.get("log_dir"):
        config.log_dir = str(raw["log_dir"])

    order = raw.get("providers")
    if isinstance(order, list) and order:
        config.provider_order = [str(p) for p in order]

    return config
