"""Discord departure notice: tells the desk channel the companion has left."""

import logging

from clients.discord import DiscordWebhookClient
from notifiers.base import DepartureNotifier

logger = logging.getLogger(__name__)


class DiscordDepartureNotifier(DepartureNotifier):
    """Posts the departure summary to a Discord channel via webhook."""

    def __init__(self, client: DiscordWebhookClient, message_prefix: str = ""):
        self._client = client
        self._message_prefix = message_prefix

    def notify(self, summary: str) -> str:
        content = " ".join(p for p in [self._message_prefix, summary] if p)

        try:
            response = self._client.send(content)
        except Exception as e:
            logger.exception("Discord departure notice failed: %s", e)
            return "Failed to post the departure notice due to a technical error."

        if response.status_code in (200, 204):
            logger.info("Discord departure notice sent (status %d)", response.status_code)
            return "Departure notice posted to Discord."
        logger.warning(
            "Discord departure notice returned unexpected status %d", response.status_code
        )
        return f"Departure notice got an unexpected status ({response.status_code})."
