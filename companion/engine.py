"""Companion engine: the one place that owns a conversation.

Purpose
-------
Callers (terminal chat, uagents agent) hand the engine two kinds of events:
typed submissions and direct clicks on the companion. The engine owns the
message log, the typing indicator, the response cycles and the escalation
phase. Callers never mutate any of that themselves; they watch the store
through subscribe() or read snapshot().

Interface contract
------------------
- submit(text): blank text is a silent no-op. Otherwise the user message is
  appended immediately and, unless the companion has already left, a response
  cycle is scheduled and returned.
- click(): zero or one assistant message, appended synchronously.
- Both must be called from inside a running asyncio event loop.
"""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable

from clients.base import ReplyClient
from companion.bank import ResponseBank
from companion.escalation import ClickEscalationController
from companion.scheduler import ResponseCycle, ResponseScheduler
from companion.settings import CompanionTexts, IndicatorMode, Timings
from companion.state import ConversationState, EscalationState, Message, Phase, Sender
from companion.store import MessageStore, StateObserver

logger = logging.getLogger(__name__)


class CompanionEngine:
    def __init__(
        self,
        client: ReplyClient,
        bank: ResponseBank,
        *,
        timings: Timings | None = None,
        texts: CompanionTexts | None = None,
        indicator: IndicatorMode = IndicatorMode.SHARED,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_departed: Callable[[EscalationState], Awaitable[None]] | None = None,
    ):
        timings = timings or Timings()
        texts = texts or CompanionTexts()
        self._store = MessageStore(clock=clock)
        self._scheduler = ResponseScheduler(
            self._store,
            client,
            timings=timings,
            texts=texts,
            indicator=indicator,
            clock=clock,
            sleep=sleep,
        )
        self._escalation = ClickEscalationController(
            self._store,
            bank,
            rng=rng,
            timings=timings,
            texts=texts,
            sleep=sleep,
            on_departed=on_departed,
        )

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def scheduler(self) -> ResponseScheduler:
        return self._scheduler

    @property
    def escalation(self) -> ClickEscalationController:
        return self._escalation

    @property
    def state(self) -> ConversationState:
        return self._store.state

    @property
    def escalation_state(self) -> EscalationState:
        return self._escalation.state

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        return self._store.subscribe(observer)

    def submit(self, text: str) -> ResponseCycle | None:
        """Handle one typed submission; see the module docstring."""
        if not text or not text.strip():
            logger.debug("Ignoring blank submission")
            return None

        # Captured once: a cycle scheduled now still completes if the
        # companion leaves while it is running.
        has_left = self._escalation.phase is Phase.LEFT
        message = self._store.append(text, Sender.USER)
        if has_left:
            logger.info("Companion has left; message id=%d goes unanswered", message.id)
            return None
        return self._scheduler.schedule(message)

    def click(self) -> Message | None:
        return self._escalation.on_click()

    async def drain(self) -> None:
        """Wait for every scheduled response cycle and a pending departure."""
        await self._scheduler.drain()
        if self._escalation.departure is not None:
            await self._escalation.departure

    def snapshot(self) -> dict:
        return {
            "conversation": self._store.state.to_dict(),
            "escalation": self._escalation.state.to_dict(),
        }
