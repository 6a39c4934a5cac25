"""Unit tests for engine wiring and the request/response chat turn."""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from adapters.chat import is_poke, respond_to_chat
from clients.naas import NoAsAServiceClient
from clients.openai_client import OpenAIReplyClient
from companion.factory import build_engine, build_notifier, build_reply_client, departure_callback
from companion.state import EscalationState, Phase
from notifiers.base import DepartureNotifier
from notifiers.discord import DiscordDepartureNotifier
from persona import DEFAULT_PERSONA_PATH, DepartureConfig, ReplyClientConfig, load_persona


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_build_reply_client_by_kind():
    naas = build_reply_client(ReplyClientConfig(kind="naas", timeout_seconds=3), "Rusty")
    assert isinstance(naas, NoAsAServiceClient)
    assert naas.timeout == 3

    openai = build_reply_client(ReplyClientConfig(kind="openai", openai_api_key="sk-test"), "Rusty")
    assert isinstance(openai, OpenAIReplyClient)


@pytest.mark.unit
def test_build_notifier_only_when_departure_is_configured():
    persona = load_persona(DEFAULT_PERSONA_PATH)
    assert build_notifier(persona) is None

    persona.departure = DepartureConfig(discord_webhook_url="https://discord.com/api/webhooks/x")
    assert isinstance(build_notifier(persona), DiscordDepartureNotifier)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_departure_callback_runs_the_notifier_with_a_summary():
    notifier = MagicMock(spec=DepartureNotifier)
    notifier.notify.return_value = "ok"

    await departure_callback(notifier, "Rusty")(EscalationState(10, Phase.LEFT))

    notifier.notify.assert_called_once_with("Rusty has left the help desk after 10 pokes.")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_built_engine_notifies_once_the_companion_has_left(clock, reply_client):
    """
    Story: An engine built from the bundled persona with a notifier is poked
    ten times. After the exit delay the companion has Left and the notifier was
    told exactly once.
    """
    notifier = MagicMock(spec=DepartureNotifier)
    notifier.notify.return_value = "ok"
    engine = build_engine(
        load_persona(DEFAULT_PERSONA_PATH),
        client=reply_client,
        notifier=notifier,
        rng=random.Random(3),
        clock=clock.now,
        sleep=clock.sleep,
    )

    for _ in range(10):
        engine.click()
    await clock.advance(1000)
    await engine.escalation.departure

    assert engine.escalation_state.phase is Phase.LEFT
    notifier.notify.assert_called_once()


# ---------------------------------------------------------------------------
# Chat turns
# ---------------------------------------------------------------------------

@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [("/poke", True), (" /CLICK ", True), ("poke", False)])
def test_is_poke(text, expected):
    assert is_poke(text) is expected


def _fast_engine(reply_client):
    """Engine on the real event loop with near-zero delays."""
    return build_engine(
        load_persona(DEFAULT_PERSONA_PATH),
        client=reply_client,
        rng=random.Random(5),
        sleep=lambda seconds: asyncio.sleep(0),
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_turn_returns_the_reply(reply_client):
    engine = _fast_engine(reply_client)

    replies = await respond_to_chat(engine, "can you reset my password?")

    assert replies == ["Because I said so."]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_turn_poke_returns_the_click_reply(reply_client):
    engine = _fast_engine(reply_client)

    replies = await respond_to_chat(engine, "/poke")

    assert len(replies) == 1
    assert engine.escalation_state.click_count == 1
    reply_client.generate_reply.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_turn_blank_returns_nothing(reply_client):
    engine = _fast_engine(reply_client)
    assert await respond_to_chat(engine, "   ") == []
    assert engine.state.messages == ()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_turn_after_the_companion_left_returns_nothing(reply_client):
    """
    Story: Ten pokes over chat drive the companion away. The next message is
    logged but the turn comes back empty.
    """
    engine = _fast_engine(reply_client)
    for _ in range(10):
        await respond_to_chat(engine, "/poke")
    await engine.drain()
    assert engine.escalation_state.phase is Phase.LEFT

    assert await respond_to_chat(engine, "hello?") == []
    assert engine.state.messages[-1].text == "hello?"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chat_turn_survives_a_failing_client():
    client = AsyncMock()
    client.generate_reply.side_effect = RuntimeError("boom")
    engine = _fast_engine(client)

    replies = await respond_to_chat(engine, "hi")

    assert replies == ["Sorry, I couldn't respond right now."]
