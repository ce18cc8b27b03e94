import httpx
import structlog

from incident_bot.errors import RemoteApiError
from incident_bot.integrations.http import send

log = structlog.get_logger()

SLACK_API = "https://slack.com/api"
SERVICE = "slack"


class SlackClient:
    def __init__(self, token: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.token = token
        self.transport = transport

    async def _request(
        self,
        method: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        resp = await send(
            SERVICE,
            "POST",
            f"{SLACK_API}/{method}",
            headers={"Authorization": f"Bearer {self.token}"},
            json=json,
            params=params,
            transport=self.transport,
        )
        data = resp.json()
        if not data.get("ok"):
            log.error("slack_api_error", method=method, error=data.get("error"))
            raise RemoteApiError(SERVICE, f"{method}: {data.get('error')}", body=resp.text)
        return data

    async def post_message(
        self,
        channel: str,
        text: str | None = None,
        blocks: list[dict] | None = None,
        thread_ts: str | None = None,
    ) -> dict:
        payload: dict = {"channel": channel}
        if text is not None:
            payload["text"] = text
        if blocks is not None:
            payload["blocks"] = blocks
        if thread_ts is not None:
            payload["thread_ts"] = thread_ts
        return await self._request("chat.postMessage", json=payload)

    async def conversations_history(self, channel: str, limit: int = 100) -> list[dict]:
        """Most recent messages in ``channel``, newest first as Slack returns them."""
        data = await self._request(
            "conversations.history", params={"channel": channel, "limit": limit}
        )
        return data.get("messages", [])

    async def respond(
        self,
        response_url: str,
        text: str,
        blocks: list[dict] | None = None,
        response_type: str = "in_channel",
    ) -> None:
        payload: dict = {"response_type": response_type, "text": text}
        if blocks is not None:
            payload["blocks"] = blocks
        await send(SERVICE, "POST", response_url, json=payload, transport=self.transport)
