"""OpenAI-backed reply client: the companion improvises its own refusal."""

import logging

from openai import AsyncOpenAI, OpenAIError

from clients.base import (
    ReplyClient,
    ReplyDecodeIncomplete,
    ReplyFetchFailed,
    log_reply_call,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


def build_system_prompt(persona_name: str) -> str:
    return (
        f"You are {persona_name}, the staff member at the No Help Desk. "
        f"Whatever the visitor asks, you decline. Give one short, dry, "
        f"good-humoured reason why not, in a single sentence. Never actually "
        f"help, never apologise at length, and never break character."
    )


class OpenAIReplyClient(ReplyClient):
    """Asks a chat model for one in-character refusal per call.

    The contract is input-free, so the model only ever sees the persona prompt;
    it is not given the conversation.
    """

    def __init__(
        self,
        api_key: str,
        persona_name: str = "Rusty",
        model: str = DEFAULT_MODEL,
        timeout: float = 10.0,
    ):
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._persona_name = persona_name
        self._model = model

    @log_reply_call
    async def generate_reply(self) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": build_system_prompt(self._persona_name)},
                    {"role": "user", "content": "Can you help me?"},
                ],
                max_tokens=120,
            )
        except OpenAIError as e:
            raise ReplyFetchFailed(f"OpenAI request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise ReplyDecodeIncomplete("Model returned no content")
        return content.strip()
