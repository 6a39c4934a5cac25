"""One chat turn against the engine, for surfaces that answer request/response style."""

from companion.engine import CompanionEngine
from companion.state import Sender

POKE_COMMANDS = ("/poke", "/click")


def is_poke(text: str) -> bool:
    return text.strip().lower() in POKE_COMMANDS


async def respond_to_chat(engine: CompanionEngine, text: str) -> list[str]:
    """Run one turn and return the assistant texts it produced.

    "/poke" clicks the companion. Anything else is a submission, and the turn
    waits until every response cycle in flight has resolved. The list is empty
    for blank input and for messages sent after the companion left.
    """
    before = len(engine.state.messages)
    if is_poke(text):
        engine.click()
    else:
        engine.submit(text)
        await engine.scheduler.drain()
    return [m.text for m in engine.state.messages[before:] if m.sender is Sender.ASSISTANT]
