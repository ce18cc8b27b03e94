import anthropic
import structlog
from anthropic import AsyncAnthropic

from incident_bot.errors import RemoteApiError

log = structlog.get_logger()

FALLBACK_REPLY = "I'm not sure how to respond to that."


class LLMClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        client: AsyncAnthropic | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._client = client if client is not None else AsyncAnthropic(api_key=api_key)

    async def complete(self, messages: list[dict], system: str | None = None) -> str:
        """Send role-tagged messages and return the first text block."""
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system is not None:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APIStatusError as exc:
            log.error("llm_api_error", status=exc.status_code, error=str(exc))
            raise RemoteApiError(
                "llm", str(exc), status_code=exc.status_code, body=str(exc.body)
            ) from exc
        except anthropic.APIError as exc:
            log.error("llm_request_error", error=str(exc))
            raise RemoteApiError("llm", str(exc)) from exc

        for block in response.content or []:
            text = getattr(block, "text", None)
            if text:
                return text.strip()
        return FALLBACK_REPLY
