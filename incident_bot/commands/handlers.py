import re
from dataclasses import dataclass
from html import escape
from typing import Awaitable, Callable

import structlog

from incident_bot.ai.conversation import (
    generate_rca_report,
    narrate_timeline,
    summarize_conversation,
)
from incident_bot.errors import ConfigurationError, RemoteApiError, ValidationError
from incident_bot.incidents.models import IncidentStatus, PublishMetadata, Severity
from incident_bot.incidents.timeline import build_incident_record, build_timeline
from incident_bot.integrations.registry import Capability, Integrations
from incident_bot.slack.messages import (
    build_error_blocks,
    build_rca_created_blocks,
    build_rca_report_blocks,
    build_rca_updated_blocks,
    build_summary_blocks,
    build_ticket_blocks,
    build_timeline_blocks,
    build_wiki_page_blocks,
)

log = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 100
MAX_HISTORY_LIMIT = 1000
PAIR_DELIMITER = " - "
SEVERITY_PATTERN = re.compile(r"[Pp][1-4]")
APOLOGY = "Sorry, something went wrong while talking to {service}. Please try again."


@dataclass(frozen=True)
class SlashCommand:
    command: str
    text: str
    user_id: str
    channel_id: str
    response_url: str
    user_name: str = ""


@dataclass(frozen=True)
class Reply:
    text: str
    blocks: list[dict] | None = None


Handler = Callable[[SlashCommand, Integrations], Awaitable[Reply]]


def _usage(command: str, args: str) -> str:
    return f"Usage: {command} {args}".rstrip()


def split_pair(text: str, usage: str) -> list[str]:
    """Split on `` - `` with no quoting; the last part keeps any extra delimiters."""
    parts = [part.strip() for part in text.split(PAIR_DELIMITER, 1)]
    if len(parts) < 2 or not all(parts):
        raise ValidationError(usage)
    return parts


def parse_limit(text: str, usage: str) -> int:
    text = text.strip()
    if not text:
        return DEFAULT_HISTORY_LIMIT
    if not text.isdigit() or not 0 < int(text) <= MAX_HISTORY_LIMIT:
        raise ValidationError(usage)
    return int(text)


def _unavailable(capability: Capability) -> Reply:
    text = f"The {capability.name} integration is not configured."
    return Reply(text, build_error_blocks(text))


async def _history(integrations: Integrations, channel_id: str, limit: int) -> list[dict]:
    return await integrations.slack.get().conversations_history(channel_id, limit=limit)


async def handle_summarize(cmd: SlashCommand, integrations: Integrations) -> Reply:
    limit = parse_limit(cmd.text, _usage(cmd.command, "[message-count]"))
    if not integrations.llm.available:
        return _unavailable(integrations.llm)

    messages = await _history(integrations, cmd.channel_id, limit)
    summary = await summarize_conversation(integrations.llm.get(), messages)
    blocks = build_summary_blocks(summary, cmd.channel_id)

    if integrations.summary_channel_id and integrations.summary_channel_id != cmd.channel_id:
        await integrations.slack.get().post_message(
            integrations.summary_channel_id, text=summary, blocks=blocks
        )
        log.info("summary_forwarded", channel_id=integrations.summary_channel_id)
    return Reply(summary, blocks)


async def handle_create_timeline(cmd: SlashCommand, integrations: Integrations) -> Reply:
    limit = parse_limit(cmd.text, _usage(cmd.command, "[message-count]"))
    messages = await _history(integrations, cmd.channel_id, limit)
    entries = build_timeline(messages)

    narrative = None
    if integrations.llm.available and entries:
        narrative = await narrate_timeline(integrations.llm.get(), messages)
    return Reply(f"Timeline with {len(entries)} entries", build_timeline_blocks(entries, narrative))


async def handle_generate_rca(cmd: SlashCommand, integrations: Integrations) -> Reply:
    limit = parse_limit(cmd.text, _usage(cmd.command, "[message-count]"))
    if not integrations.llm.available:
        return _unavailable(integrations.llm)

    messages = await _history(integrations, cmd.channel_id, limit)
    report = await generate_rca_report(integrations.llm.get(), messages)
    return Reply(report, build_rca_report_blocks(report))


async def handle_create_ticket(cmd: SlashCommand, integrations: Integrations) -> Reply:
    summary, description = split_pair(cmd.text, _usage(cmd.command, "<summary> - <description>"))
    if not integrations.jira.available:
        return _unavailable(integrations.jira)

    jira = integrations.jira.get()
    issue_key = await jira.create_issue(integrations.jira_project_key, summary, description)
    return Reply(
        f"Created Jira issue {issue_key}",
        build_ticket_blocks(issue_key, summary, jira.issue_url(issue_key)),
    )


async def handle_create_wiki_page(cmd: SlashCommand, integrations: Integrations) -> Reply:
    title, content = split_pair(cmd.text, _usage(cmd.command, "<title> - <content>"))
    if not integrations.confluence.available:
        return _unavailable(integrations.confluence)

    confluence = integrations.confluence.get()
    page_id = await confluence.create_page(
        integrations.confluence_space_key,
        title,
        f"<p>{escape(content, quote=True)}</p>",
        parent_id=integrations.confluence_parent_page_id,
    )
    url = confluence.page_url(integrations.confluence_space_key, page_id)
    return Reply(f"Created Confluence page {title}", build_wiki_page_blocks(title, url))


def _split_severity(text: str) -> tuple[str, Severity]:
    """Peel a trailing ``- P1``..``- P4`` off the title; anything else stays in it."""
    head, sep, tail = text.rpartition(PAIR_DELIMITER)
    if sep and SEVERITY_PATTERN.fullmatch(tail.strip()):
        return head.strip(), Severity(tail.strip().upper())
    return text, Severity.P3


async def handle_incident_rca(cmd: SlashCommand, integrations: Integrations) -> Reply:
    usage = _usage(cmd.command, "<incident-id> - <title> [- <severity P1-P4>]")
    incident_id, rest = split_pair(cmd.text, usage)
    title, severity = _split_severity(rest)
    if not integrations.confluence.available:
        return _unavailable(integrations.confluence)

    messages = await _history(integrations, cmd.channel_id, DEFAULT_HISTORY_LIMIT)
    description = ""
    if integrations.llm.available and messages:
        description = await summarize_conversation(integrations.llm.get(), messages)

    record = build_incident_record(
        incident_id, title, messages, severity=severity, description=description
    )
    metadata = PublishMetadata(
        space_key=integrations.confluence_space_key,
        parent_id=integrations.confluence_parent_page_id,
        labels=["incident", "rca", f"severity-{severity.value}"],
    )
    page_id = await integrations.publisher().create(record, metadata)
    url = integrations.confluence.get().page_url(metadata.space_key, page_id)
    return Reply(
        f"Created RCA document for incident {record.id}",
        build_rca_created_blocks(record, url),
    )


def _severity_from_labels(page: dict) -> Severity:
    labels = ((page.get("metadata") or {}).get("labels") or {}).get("results") or []
    for label in labels:
        name = label.get("name", "")
        if name.lower().startswith("severity-"):
            try:
                return Severity(name.split("-", 1)[1].upper())
            except ValueError:
                continue
    return Severity.P3


async def handle_update_rca(cmd: SlashCommand, integrations: Integrations) -> Reply:
    statuses = "|".join(status.value for status in IncidentStatus)
    usage = _usage(cmd.command, f"<page-id> <{statuses}>")
    parts = cmd.text.split()
    if len(parts) != 2:
        raise ValidationError(usage)
    page_id, status_text = parts
    try:
        status = IncidentStatus(status_text.lower())
    except ValueError:
        raise ValidationError(usage) from None
    if not integrations.confluence.available:
        return _unavailable(integrations.confluence)

    confluence = integrations.confluence.get()
    page = await confluence.get_page(page_id)
    messages = await _history(integrations, cmd.channel_id, DEFAULT_HISTORY_LIMIT)
    record = build_incident_record(
        page_id,
        page.get("title") or page_id,
        messages,
        severity=_severity_from_labels(page),
        status=status,
    )
    await integrations.publisher().update(page_id, record)
    await confluence.add_comment(
        page_id, f"Status updated to {status.value} by {cmd.user_name or cmd.user_id}"
    )
    return Reply(
        f"Updated RCA document status to {status.value}",
        build_rca_updated_blocks(status.value),
    )


HANDLERS: dict[str, Handler] = {
    "/summarize": handle_summarize,
    "/create-timeline": handle_create_timeline,
    "/generate-rca": handle_generate_rca,
    "/create-ticket": handle_create_ticket,
    "/create-wiki-page": handle_create_wiki_page,
    "/incident-rca": handle_incident_rca,
    "/update-rca": handle_update_rca,
}


async def run_command(cmd: SlashCommand, integrations: Integrations) -> Reply:
    """Run one command and turn every failure into a user-facing reply."""
    handler = HANDLERS.get(cmd.command)
    if handler is None:
        return Reply(f"Unknown command {cmd.command}")

    try:
        return await handler(cmd, integrations)
    except ValidationError as exc:
        log.info("command_usage_error", command=cmd.command, text=cmd.text)
        return Reply(exc.usage)
    except ConfigurationError as exc:
        log.warning("command_integration_missing", command=cmd.command, missing=exc.missing)
        text = "This command needs an integration that is not configured."
        return Reply(text, build_error_blocks(text))
    except RemoteApiError as exc:
        log.error(
            "command_remote_error",
            command=cmd.command,
            service=exc.service,
            status=exc.status_code,
            error=str(exc),
        )
        text = APOLOGY.format(service=exc.service)
        return Reply(text, build_error_blocks(text))
    except Exception:
        log.exception("command_failed", command=cmd.command)
        text = "Sorry, I encountered an error processing your request."
        return Reply(text, build_error_blocks(text))


async def dispatch_command(cmd: SlashCommand, integrations: Integrations) -> None:
    if not integrations.slack.available:
        log.warning("command_skipped", command=cmd.command, reason="slack unavailable")
        return
    reply = await run_command(cmd, integrations)
    try:
        await integrations.slack.get().respond(cmd.response_url, reply.text, reply.blocks)
    except RemoteApiError as exc:
        log.error("reply_failed", command=cmd.command, error=str(exc))
