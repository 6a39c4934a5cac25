"""Response cycles: the delayed pipeline from a user message to its reply.

Each accepted submission gets its own cycle:

    submit --read_delay--> typing indicator on --typing_delay--> one client call
           --> assistant message appended --> typing indicator off

Cycles are fire-and-forget. Nothing in the engine cancels a cycle once it is
scheduled and nothing stops two cycles from overlapping, so replies land in the
order the network calls settle, not the order the user typed. With
IndicatorMode.SHARED one cycle's "off" also hides the indicator while another
cycle is still typing.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from clients.base import ReplyClient, ReplyDecodeIncomplete, ReplyFetchFailed
from companion.settings import CompanionTexts, IndicatorMode, Timings
from companion.state import Message, Sender
from companion.store import MessageStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _truncate(s: str, max_len: int = 120) -> str:
    return s[:max_len] + "..." if len(s) > max_len else s


class CycleStatus(str, Enum):
    SCHEDULED = "scheduled"
    TYPING = "typing"
    RESOLVED = "resolved"


class CycleOutcome(str, Enum):
    REPLIED = "replied"
    GENERIC_FALLBACK = "generic_fallback"
    FAILURE_FALLBACK = "failure_fallback"


@dataclass
class ResponseCycle:
    """One scheduled response. Times are clock seconds."""

    cycle_id: int
    submission_id: int
    submitted_at: float
    show_at: float
    resolve_at: float
    status: CycleStatus = CycleStatus.SCHEDULED
    outcome: CycleOutcome | None = None
    reply: Message | None = None
    task: asyncio.Task | None = field(default=None, repr=False, compare=False)

    @property
    def done(self) -> bool:
        return self.status is CycleStatus.RESOLVED

    def __await__(self):
        return self.task.__await__()


class ResponseScheduler:
    def __init__(
        self,
        store: MessageStore,
        client: ReplyClient,
        *,
        timings: Timings | None = None,
        texts: CompanionTexts | None = None,
        indicator: IndicatorMode = IndicatorMode.SHARED,
        clock: Callable[[], float],
        sleep: Sleep = asyncio.sleep,
    ):
        self._store = store
        self._client = client
        self._timings = timings or Timings()
        self._texts = texts or CompanionTexts()
        self._indicator = IndicatorMode(indicator)
        self._clock = clock
        self._sleep = sleep
        self._ids = itertools.count(1)
        self._scheduled = 0
        # Only cycles still in flight; a resolved cycle lives on in whatever
        # schedule() returned to the caller.
        self._pending: list[ResponseCycle] = []

    @property
    def scheduled_count(self) -> int:
        return self._scheduled

    @property
    def pending(self) -> tuple[ResponseCycle, ...]:
        return tuple(self._pending)

    def schedule(self, submission: Message) -> ResponseCycle:
        """Start a cycle answering submission. Needs a running event loop."""
        now = self._clock()
        cycle = ResponseCycle(
            cycle_id=next(self._ids),
            submission_id=submission.id,
            submitted_at=now,
            show_at=now + self._timings.read_delay,
            resolve_at=now + self._timings.read_delay + self._timings.typing_delay,
        )
        cycle.task = asyncio.get_running_loop().create_task(
            self._run(cycle), name=f"response-cycle-{cycle.cycle_id}"
        )
        self._pending.append(cycle)
        self._scheduled += 1
        logger.info(
            "Cycle %d scheduled for message id=%d (%d in flight)",
            cycle.cycle_id,
            submission.id,
            len(self.pending),
        )
        return cycle

    async def drain(self) -> None:
        """Wait until every cycle scheduled so far has resolved."""
        while self.pending:
            # A task cancelled at shutdown must not abort the wait for the rest.
            await asyncio.gather(*(c.task for c in self.pending), return_exceptions=True)

    async def _run(self, cycle: ResponseCycle) -> None:
        try:
            await self._sleep(self._timings.read_delay)
            cycle.status = CycleStatus.TYPING
            self._show_typing()
            try:
                await self._sleep(self._timings.typing_delay)
                text, cycle.outcome = await self._fetch_reply(cycle)
                cycle.reply = self._store.append(text, Sender.ASSISTANT)
            finally:
                self._hide_typing()
        finally:
            cycle.status = CycleStatus.RESOLVED
            self._pending.remove(cycle)
        logger.info(
            "Cycle %d resolved (%s): %s",
            cycle.cycle_id,
            cycle.outcome.value,
            _truncate(text),
        )

    async def _fetch_reply(self, cycle: ResponseCycle) -> tuple[str, CycleOutcome]:
        try:
            reply = await self._client.generate_reply()
        except ReplyDecodeIncomplete as e:
            logger.warning("Cycle %d: incomplete reply payload: %s", cycle.cycle_id, e)
            return self._texts.generic_fallback, CycleOutcome.GENERIC_FALLBACK
        except ReplyFetchFailed as e:
            logger.warning("Cycle %d: reply fetch failed: %s", cycle.cycle_id, e)
            return self._texts.failure_fallback, CycleOutcome.FAILURE_FALLBACK
        except Exception:
            logger.exception("Cycle %d: reply client raised unexpectedly", cycle.cycle_id)
            return self._texts.failure_fallback, CycleOutcome.FAILURE_FALLBACK

        if not isinstance(reply, str) or not reply.strip():
            logger.warning("Cycle %d: client returned an empty reply", cycle.cycle_id)
            return self._texts.generic_fallback, CycleOutcome.GENERIC_FALLBACK
        return reply, CycleOutcome.REPLIED

    def _show_typing(self) -> None:
        if self._indicator is IndicatorMode.PER_CYCLE:
            self._store.begin_typing()
        else:
            self._store.set_typing(True)

    def _hide_typing(self) -> None:
        if self._indicator is IndicatorMode.PER_CYCLE:
            self._store.end_typing()
        else:
            self._store.set_typing(False)
