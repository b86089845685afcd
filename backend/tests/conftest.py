"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real Discord bot or a persistent database
os.environ.setdefault("DISCORD_BOT_TOKEN", "discord-test-fake-token")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUDIT_LOG_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
