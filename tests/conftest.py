"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach real storage/auth services or a real database
os.environ.setdefault("STORAGE_SERVICE_KEY", "service-key-test-fake")
os.environ.setdefault("STORAGE_BASE_URL", "http://storage.test")
os.environ.setdefault("AUTH_BASE_URL", "http://auth.test")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
