"""Discord webhook wrapper."""

from discord_webhook import DiscordWebhook


class DiscordWebhookClient:
    """Posts plain messages to one webhook, optionally mentioning a role."""

    def __init__(self, webhook_url: str, role_id: str = "", username: str = ""):
        self.webhook_url = webhook_url
        self.role_id = role_id
        self.username = username

    def send(self, message: str):
        if self.role_id:
            content = f"<@&{self.role_id}> {message}"
            allowed_mentions = {"roles": [self.role_id]}
        else:
            content = message
            allowed_mentions = {"parse": []}

        kwargs = {}
        if self.username:
            kwargs["username"] = self.username
        webhook = DiscordWebhook(
            url=self.webhook_url,
            content=content,
            allowed_mentions=allowed_mentions,
            **kwargs,
        )
        return webhook.execute()
