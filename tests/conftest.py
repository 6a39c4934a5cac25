"""Shared fixtures: a virtual clock and a small response bank."""

import asyncio
import heapq
import itertools
from unittest.mock import AsyncMock

import pytest

from companion.bank import BankEntry, ResponseBank

START_MS = 1_700_000_000_000


async def _settle(rounds: int = 25) -> None:
    """Let every task that is ready run until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Virtual time for the engine's clock and sleep hooks.

    Time only moves when a test calls advance(ms). Sleepers wake in deadline
    order and each one gets to run before the next deadline is reached, so
    "what is true at t=800ms" can be asserted exactly.
    """

    def __init__(self, start_ms: int = START_MS):
        self.now_ms = start_ms
        self._start_ms = start_ms
        self._sleepers: list = []
        self._seq = itertools.count()

    @property
    def elapsed_ms(self) -> int:
        return self.now_ms - self._start_ms

    def now(self) -> float:
        return self.now_ms / 1000

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        deadline = self.now_ms + round(seconds * 1000)
        heapq.heappush(self._sleepers, (deadline, next(self._seq), future))
        await future

    async def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        await _settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            self.now_ms = deadline
            if not future.done():
                future.set_result(None)
            await _settle()
        self.now_ms = target
        await _settle()

    async def advance_to(self, elapsed_ms: int) -> None:
        """Advance until elapsed_ms have passed since the clock started."""
        await self.advance(elapsed_ms - self.elapsed_ms)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bank() -> ResponseBank:
    return ResponseBank(
        responses=(
            BankEntry("No."),
            BankEntry("Still no."),
            BankEntry("Absolutely not."),
        )
    )


@pytest.fixture
def reply_client() -> AsyncMock:
    """A reply client whose generate_reply() answers "Because I said so."."""
    client = AsyncMock()
    client.generate_reply.return_value = "Because I said so."
    return client


@pytest.fixture
def settle():
    return _settle
