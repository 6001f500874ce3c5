# conftest.py
# Pytest configuration for the Endless Forge gateway test environment
#
# Sets test-mode environment flags before gateway.config is imported so no
# Firebase app, JSON mock database or per-IP throttling is initialized.
#
# @see: gateway/config.py - Reads these flags at import time
# @note: TESTING=true enables mock-token-<uid> bearer tokens

import os

os.environ.setdefault("TESTING", "true")
os.environ.setdefault("USE_REAL_FIREBASE", "false")
os.environ.setdefault("MOCK_DB_FILE", "")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("GATEWAY_API_KEY", "")
os.environ.pop("PLAN_LIMITS_JSON", None)
