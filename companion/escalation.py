"""Click escalation: what happens when the user keeps poking the companion.

Clicks 1-8 get a random canned reply, click 9 a warning, click 10 a farewell.
After the farewell the companion is Leaving; once the exit delay has passed it
has Left and stays gone for the rest of the session. Clicks while Leaving or
Left change nothing.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable

from companion.bank import ResponseBank
from companion.settings import CompanionTexts, Timings
from companion.state import (
    ClickOutcome,
    EscalationState,
    Message,
    Phase,
    Sender,
    complete_departure,
    register_click,
)
from companion.store import MessageStore

logger = logging.getLogger(__name__)


class ClickEscalationController:
    def __init__(
        self,
        store: MessageStore,
        bank: ResponseBank,
        *,
        rng: random.Random | None = None,
        timings: Timings | None = None,
        texts: CompanionTexts | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_departed: Callable[[EscalationState], Awaitable[None]] | None = None,
    ):
        self._store = store
        self._bank = bank
        self._rng = rng or random.Random()
        self._timings = timings or Timings()
        self._texts = texts or CompanionTexts()
        self._sleep = sleep
        self._on_departed = on_departed
        self._state = EscalationState()
        self.departure: asyncio.Task | None = None

    @property
    def state(self) -> EscalationState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def on_click(self) -> Message | None:
        """Handle one direct click on the companion.

        Returns the assistant message the click produced, or None when the
        click was ignored. Must be called from inside a running event loop
        because the tenth click schedules the departure.
        """
        new_state, outcome = register_click(self._state)
        if outcome is ClickOutcome.IGNORED:
            logger.debug("Click ignored in phase %s", self._state.phase.value)
            return None

        if outcome is ClickOutcome.BANK_REPLY:
            text = self._bank.choose(self._rng).text
        elif outcome is ClickOutcome.WARNING:
            text = self._texts.warning
        else:
            text = self._texts.farewell

        message = self._store.append(text, Sender.ASSISTANT)
        self._state = new_state
        logger.info(
            "Click %d -> %s (phase %s)",
            new_state.click_count,
            outcome.value,
            new_state.phase.value,
        )

        if outcome is ClickOutcome.FAREWELL:
            self.departure = asyncio.get_running_loop().create_task(
                self._depart(), name="companion-departure"
            )
        return message

    async def _depart(self) -> None:
        await self._sleep(self._timings.exit_delay)
        self._state = complete_departure(self._state)
        logger.info("Companion has left after %d clicks", self._state.click_count)
        if self._on_departed is None:
            return
        try:
            await self._on_departed(self._state)
        except Exception:
            logger.exception("Departure callback failed")
