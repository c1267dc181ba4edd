"""Shared test doubles."""

from typing import Any, Iterable

from sideline.services import MemoryStore


class FakeClock:
    """Callable epoch-ms source advanced by hand."""

    def __init__(self, start: int = 1_000_000):
        self.t = start

    def __call__(self) -> int:
        return self.t

    def advance(self, ms: int) -> None:
        self.t += ms


class FailingStore(MemoryStore):
    """MemoryStore whose writes to some keys fail while ``broken`` is set."""

    def __init__(self, fail_keys: Iterable[str], **kwargs):
        super().__init__(**kwargs)
        self.fail_keys = set(fail_keys)
        self.broken = False

    def save(self, key: str, value: Any) -> None:
        if self.broken and key in self.fail_keys:
            raise OSError(f"disk full writing {key}")
        super().save(key, value)
