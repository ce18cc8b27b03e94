from incident_bot.incidents.models import IncidentRecord, TimelineEntry
from incident_bot.rca.renderer import format_timestamp


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _header(text: str) -> dict:
    return {"type": "header", "text": {"type": "plain_text", "text": text}}


DIVIDER = {"type": "divider"}


def build_summary_blocks(summary: str, channel_id: str) -> list[dict]:
    return [
        _header("\U0001f4dd Conversation Summary"),
        _section(summary),
        DIVIDER,
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"Source: <#{channel_id}>"}],
        },
    ]


def build_timeline_blocks(entries: list[TimelineEntry], narrative: str | None = None) -> list[dict]:
    lines = [
        f"`{format_timestamp(entry.timestamp)}` *{entry.action}* <@{entry.user}>: {entry.details[:200]}"
        for entry in entries
    ]
    blocks = [
        _header("\U0001f552 Incident Timeline"),
        _section("\n".join(lines) if lines else "_No messages found in this channel._"),
    ]
    if narrative:
        blocks.append(DIVIDER)
        blocks.append(_section(narrative))
    return blocks


def build_rca_report_blocks(report: str) -> list[dict]:
    return [_header("\U0001f50e Root Cause Analysis"), _section(report), DIVIDER]


def build_ticket_blocks(issue_key: str, summary: str, url: str) -> list[dict]:
    return [
        _section(f"\u2705 Created Jira issue *{issue_key}*"),
        _section(f"*Summary:* {summary}\n<{url}|Open in Jira>"),
    ]


def build_wiki_page_blocks(title: str, url: str) -> list[dict]:
    return [
        _section(f"\u2705 Created Confluence page *{title}*"),
        _section(f"<{url}|Open in Confluence>"),
    ]


def build_rca_created_blocks(record: IncidentRecord, url: str) -> list[dict]:
    return [
        _section(f"\u2705 Created RCA document for incident {record.id}"),
        _section(
            f"*Title:* {record.title}\n"
            f"*Severity:* {record.severity.value}\n"
            f"*Status:* {record.status.value}"
        ),
        _section(f"View the RCA document here: {url}"),
    ]


def build_rca_updated_blocks(status: str) -> list[dict]:
    return [_section(f"\u2705 Updated RCA document status to {status}")]


def build_error_blocks(message: str) -> list[dict]:
    return [_section(f"\u274c {message}")]
