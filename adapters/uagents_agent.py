"""Uagents chat protocol adapter: receives messages, runs a companion chat turn, replies."""

from datetime import datetime, timezone
from uuid import uuid4

from uagents import Agent, Context, Protocol
from uagents_core.contrib.protocols.chat import (
    ChatAcknowledgement,
    ChatMessage,
    EndSessionContent,
    TextContent,
    chat_protocol_spec,
)

from adapters.chat import respond_to_chat
from companion.engine import CompanionEngine


def create_agent(
    agent_seed: str,
    engine: CompanionEngine,
    *,
    name: str = "no-help-desk",
    port: int = 8001,
):
    """Build and return a uagents Agent that fronts one companion conversation.

    Every sender talks to the same engine; the companion keeps a single
    conversation per process.
    """
    agent = Agent(
        name=name,
        seed=agent_seed,
        port=port,
        mailbox=True,
        publish_agent_details=True,
    )
    protocol = Protocol(spec=chat_protocol_spec)

    @protocol.on_message(ChatMessage)
    async def handle_message(ctx: Context, sender: str, msg: ChatMessage):
        await ctx.send(
            sender,
            ChatAcknowledgement(
                timestamp=datetime.now(tz=timezone.utc), acknowledged_msg_id=msg.msg_id
            ),
        )

        text = ""
        for item in msg.content:
            if isinstance(item, TextContent):
                text += item.text

        replies: list[str] = []
        try:
            replies = await respond_to_chat(engine, text)
        except Exception:
            ctx.logger.exception("Error running companion chat turn")

        content = [TextContent(type="text", text=reply) for reply in replies]
        content.append(EndSessionContent(type="end-session"))
        await ctx.send(
            sender,
            ChatMessage(
                timestamp=datetime.now(tz=timezone.utc),
                msg_id=uuid4(),
                content=content,
            ),
        )

    @protocol.on_message(ChatAcknowledgement)
    async def handle_ack(ctx: Context, sender: str, msg: ChatAcknowledgement):
        pass

    agent.include(protocol, publish_manifest=True)
    return agent
