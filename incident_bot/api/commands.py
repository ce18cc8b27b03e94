import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import JSONResponse

from incident_bot.commands.handlers import HANDLERS, SlashCommand, dispatch_command
from incident_bot.config import settings
from incident_bot.deps import get_integrations
from incident_bot.integrations.registry import Integrations
from incident_bot.slack.verify import verify_slack_signature

log = structlog.get_logger()

router = APIRouter()

USAGE_TEXT = (
    "*Available commands:*\n"
    "\u2022 `/summarize [message-count]`\n"
    "\u2022 `/create-timeline [message-count]`\n"
    "\u2022 `/generate-rca [message-count]`\n"
    "\u2022 `/create-ticket <summary> - <description>`\n"
    "\u2022 `/create-wiki-page <title> - <content>`\n"
    "\u2022 `/incident-rca <incident-id> - <title> [- <severity>]`\n"
    "\u2022 `/update-rca <page-id> <status>`"
)


@router.post("/commands")
async def slack_commands(
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

    form = await request.form()
    command = SlashCommand(
        command=form.get("command", ""),
        text=(form.get("text") or "").strip(),
        user_id=form.get("user_id", ""),
        user_name=form.get("user_name", ""),
        channel_id=form.get("channel_id", ""),
        response_url=form.get("response_url", ""),
    )

    if command.command not in HANDLERS:
        return JSONResponse({"response_type": "ephemeral", "text": USAGE_TEXT})

    log.info(
        "slash_command",
        command=command.command,
        user_id=command.user_id,
        channel_id=command.channel_id,
        text=command.text,
    )

    # Slack expects an answer within 3 seconds; the work runs after the ack.
    background_tasks.add_task(dispatch_command, command, integrations)

    return JSONResponse(
        {"response_type": "ephemeral", "text": "\u23f3 Working on it..."}
    )
