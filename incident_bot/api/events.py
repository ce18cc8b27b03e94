import json

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from incident_bot.ai.conversation import reply_to_message
from incident_bot.config import settings
from incident_bot.deps import get_integrations
from incident_bot.errors import RemoteApiError
from incident_bot.integrations.registry import Integrations
from incident_bot.slack.verify import verify_slack_signature

log = structlog.get_logger()

router = APIRouter()

ERROR_REPLY = "Sorry, I encountered an error processing your request."


async def answer_message(integrations: Integrations, channel_id: str, text: str) -> None:
    slack = integrations.slack.get()
    try:
        answer = await reply_to_message(integrations.llm.get(), text)
    except RemoteApiError as exc:
        log.error("message_reply_failed", channel_id=channel_id, error=str(exc))
        answer = ERROR_REPLY
    try:
        await slack.post_message(channel_id, text=answer)
    except RemoteApiError as exc:
        log.error("message_post_failed", channel_id=channel_id, error=str(exc))


@router.post("/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    integrations: Integrations = Depends(get_integrations),
) -> Response:
    body = await request.body()
    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    if not settings.slack_signing_secret:
        log.warning("slack_request_rejected", reason="signing secret not configured")
        return Response(status_code=503)
    if not verify_slack_signature(settings.slack_signing_secret, timestamp, body, signature):
        return Response(status_code=401)

    payload = json.loads(body)

    if payload.get("type") == "url_verification":
        return Response(
            content=json.dumps({"challenge": payload["challenge"]}),
            media_type="application/json",
        )

    event = payload.get("event", {})
    if event.get("type") != "message":
        return Response(status_code=200)
    if event.get("bot_id") or event.get("subtype"):
        return Response(status_code=200)

    text = event.get("text") or ""
    channel_id = event.get("channel")
    if not text or not channel_id:
        return Response(status_code=200)

    if not (integrations.slack.available and integrations.llm.available):
        log.warning("message_ignored", channel_id=channel_id, reason="integration unavailable")
        return Response(status_code=200)

    log.info("message_received", channel_id=channel_id, user=event.get("user"))
    background_tasks.add_task(answer_message, integrations, channel_id, text)
    return Response(status_code=200)
