"""Local terminal chat: type to the companion, /poke to poke it."""

import asyncio
import json
import logging
import os

from adapters.chat import is_poke
from companion.factory import build_engine
from companion.state import ConversationState, Sender
from persona import DEFAULT_PERSONA_PATH, PersonaConfig, load_persona


def _configure_logging() -> None:
    level = getattr(logging, os.getenv("LOG_LEVEL", "ERROR").upper(), logging.ERROR)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _make_printer(name: str):
    """Store observer that prints assistant messages and indicator changes."""
    seen = 0
    typing = False

    def on_change(state: ConversationState) -> None:
        nonlocal seen, typing
        for message in state.messages[seen:]:
            if message.sender is Sender.ASSISTANT:
                print(f"\n{name}: {message.text}\n")
        seen = len(state.messages)
        if state.typing_indicator_visible and not typing:
            print(f"{name} is typing...")
        typing = state.typing_indicator_visible

    return on_change


async def chat(persona: PersonaConfig) -> None:
    engine = build_engine(persona)
    engine.subscribe(_make_printer(persona.companion_name))

    print(
        f"{persona.companion_name} is at the desk. Type a message, '/poke' to poke, "
        f"'/state' to dump state, 'quit' or 'exit' to stop.\n"
    )
    while True:
        try:
            line = await asyncio.to_thread(input, "You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            break
        command = line.strip()
        if command.lower() in ("quit", "exit", "q"):
            if engine.scheduler.pending:
                print("Waiting for pending replies...")
            await engine.drain()
            print("Bye.")
            break
        if command == "/state":
            print(json.dumps(engine.snapshot(), indent=2))
            continue
        if is_poke(command):
            engine.click()
            continue
        engine.submit(line)


def main() -> None:
    _configure_logging()
    persona = load_persona(os.environ.get("COMPANION_CONFIG", DEFAULT_PERSONA_PATH))
    asyncio.run(chat(persona))


if __name__ == "__main__":
    main()
