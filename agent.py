"""Entrypoint: load the persona, wire the engine, run the uagents adapter."""

import logging
import os

from adapters.uagents_agent import create_agent
from companion.factory import build_engine
from persona import DEFAULT_PERSONA_PATH, load_persona, resolve_env


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    persona = load_persona(os.environ.get("COMPANION_CONFIG", DEFAULT_PERSONA_PATH))
    engine = build_engine(persona)
    agent = create_agent(
        agent_seed=resolve_env(persona.agent_seed_env_key),
        engine=engine,
        name=persona.persona_id,
    )
    agent.run()


if __name__ == "__main__":
    main()
