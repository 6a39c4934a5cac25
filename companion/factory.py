"""Wire a CompanionEngine from a persona config."""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable

from clients.base import ReplyClient
from clients.discord import DiscordWebhookClient
from clients.naas import NoAsAServiceClient
from clients.openai_client import OpenAIReplyClient
from companion.bank import load_response_bank
from companion.engine import CompanionEngine
from companion.state import EscalationState
from notifiers.base import DepartureNotifier
from notifiers.discord import DiscordDepartureNotifier
from persona import PersonaConfig, ReplyClientConfig

logger = logging.getLogger(__name__)


def build_reply_client(config: ReplyClientConfig, persona_name: str) -> ReplyClient:
    if config.kind == "openai":
        return OpenAIReplyClient(
            api_key=config.openai_api_key,
            persona_name=persona_name,
            model=config.model,
            timeout=config.timeout_seconds,
        )
    return NoAsAServiceClient(
        endpoint_url=config.endpoint_url,
        timeout=config.timeout_seconds,
    )


def build_notifier(persona: PersonaConfig) -> DepartureNotifier | None:
    if persona.departure is None:
        return None
    client = DiscordWebhookClient(
        webhook_url=persona.departure.discord_webhook_url,
        role_id=persona.departure.discord_role_id,
        username=persona.companion_name,
    )
    return DiscordDepartureNotifier(client, message_prefix=persona.departure.message_prefix)


def departure_callback(
    notifier: DepartureNotifier, companion_name: str
) -> Callable[[EscalationState], Awaitable[None]]:
    """Adapt a blocking notifier into the engine's async departure hook."""

    async def on_departed(state: EscalationState) -> None:
        summary = f"{companion_name} has left the help desk after {state.click_count} pokes."
        result = await asyncio.to_thread(notifier.notify, summary)
        logger.info("Departure notifier: %s", result)

    return on_departed


def build_engine(
    persona: PersonaConfig,
    *,
    client: ReplyClient | None = None,
    notifier: DepartureNotifier | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CompanionEngine:
    """Build the engine for persona; any collaborator can be overridden."""
    client = client or build_reply_client(persona.reply_client, persona.companion_name)
    notifier = notifier or build_notifier(persona)
    return CompanionEngine(
        client=client,
        bank=load_response_bank(persona.bank_path),
        timings=persona.timings,
        texts=persona.texts,
        indicator=persona.typing_indicator,
        rng=rng,
        clock=clock,
        sleep=sleep,
        on_departed=(
            departure_callback(notifier, persona.companion_name) if notifier else None
        ),
    )
