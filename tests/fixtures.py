"""
Test Fixtures

Shared test doubles and sample data for the AI Hub test suite.
"""

import time

import redis


class InMemoryRedis:
    """
    Minimal async stand-in for redis.asyncio.Redis.

    Supports the commands the cache gateway uses (get, set with ex,
    delete, ping) and records every call for assertions. Setting
    `fail_with` makes every command raise that exception.
    """

    def __init__(self) -> None:
        self.data: dict[str, tuple[str, float | None]] = {}
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def get(self, key: str):
        self.calls.append(("get", key))
        self._check()
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self.data[key]
            return None
        return value

    async def set(self, key: str, value: str, ex: int | None = None):
        self.calls.append(("set", key, value, ex))
        self._check()
        expires_at = time.monotonic() + ex if ex is not None else None
        self.data[key] = (value, expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        self.calls.append(("delete", *keys))
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        self.calls.append(("ping",))
        self._check()
        return True

    def commands(self, name: str) -> list[tuple]:
        """Return recorded calls for one command."""
        return [c for c in self.calls if c[0] == name]


def connection_error() -> redis.ConnectionError:
    return redis.ConnectionError("Error connecting to localhost:6379")


SAMPLE_PROMPTS = [
    "Suggest three follow-up tasks for writing release notes",
    "Summarize this task: migrate the billing database",
    "Estimate the effort to add dark mode to the settings page",
]
