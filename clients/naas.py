"""No-as-a-Service client: one GET, one reason why not."""

import logging

import httpx

from clients.base import (
    ReplyClient,
    ReplyDecodeIncomplete,
    ReplyFetchFailed,
    log_reply_call,
)

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_URL = "https://naas.isalman.dev/no"
DEFAULT_TIMEOUT_SECONDS = 10.0
REPLY_FIELD = "reason"


class NoAsAServiceClient(ReplyClient):
    """Fetches a reply from a JSON endpoint that answers {"reason": "..."}."""

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport

    @log_reply_call
    async def generate_reply(self) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                r = await client.get(self.endpoint_url)
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPError as e:
            raise ReplyFetchFailed(f"GET {self.endpoint_url} failed: {e}") from e
        except ValueError as e:
            raise ReplyFetchFailed(f"GET {self.endpoint_url} returned invalid JSON") from e

        reason = payload.get(REPLY_FIELD) if isinstance(payload, dict) else None
        if not isinstance(reason, str) or not reason:
            logger.debug("Payload without %r: %r", REPLY_FIELD, payload)
            raise ReplyDecodeIncomplete(f"Payload has no usable {REPLY_FIELD!r} field")
        return reason
