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
Multiprompt — Multi-AI prompt comparator.

Sends one prompt to several AI text-generation providers in parallel and
returns every provider's answer (or error) side by side.
"""

__version__ = "1.2.0"
__author__ = "Multiprompt Team"
