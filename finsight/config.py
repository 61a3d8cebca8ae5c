"""Configuration management for FinSight.

This module centralizes configuration values including paths, the
insight-service settings, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in finsight/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINSIGHT_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINSIGHT_DB_PATH", DATA_DIR / "finsight.db")
).resolve()

# Insight service (natural-language parsing and whisper insights)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
MODEL = os.getenv("FINSIGHT_MODEL", "gpt-4o-mini")
REQUEST_TIMEOUT = float(os.getenv("FINSIGHT_REQUEST_TIMEOUT", "20"))

# Number of rows shown in the dashboard's recent-transactions list
RECENT_TRANSACTIONS_LIMIT = 10
