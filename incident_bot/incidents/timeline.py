from datetime import datetime, timezone

from incident_bot.incidents.models import (
    IncidentRecord,
    IncidentStatus,
    Severity,
    TimelineEntry,
)

# Checked in order, first match wins.
_ACTION_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Resolution", ("fixed", "resolved")),
    ("Investigation", ("investigating",)),
    ("Error Report", ("error", "failed")),
]
DEFAULT_ACTION = "Update"


def classify_action(text: str) -> str:
    lowered = text.lower()
    for label, keywords in _ACTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return label
    return DEFAULT_ACTION


def parse_slack_ts(ts: str) -> datetime:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


def build_timeline(messages: list[dict]) -> list[TimelineEntry]:
    """Turn Slack history messages into timeline entries, oldest first.

    ``conversations.history`` returns newest first, so entries are sorted by
    their timestamp. Messages without text or timestamp are skipped.
    """
    entries = []
    for msg in messages:
        text = (msg.get("text") or "").strip()
        ts = msg.get("ts")
        if not text or not ts:
            continue
        entries.append(
            TimelineEntry(
                timestamp=parse_slack_ts(ts),
                user=msg.get("user") or msg.get("username") or "unknown",
                action=classify_action(text),
                details=text,
            )
        )
    entries.sort(key=lambda entry: entry.timestamp)
    return entries


def build_incident_record(
    incident_id: str,
    title: str,
    messages: list[dict],
    *,
    severity: Severity = Severity.P3,
    status: IncidentStatus = IncidentStatus.INVESTIGATING,
    description: str = "",
    impacted_services: list[str] | None = None,
    fallback_start: datetime | None = None,
) -> IncidentRecord:
    timeline = build_timeline(messages)
    if timeline:
        start_time = timeline[0].timestamp
    else:
        start_time = fallback_start or datetime.now(timezone.utc)

    end_time = None
    if status == IncidentStatus.RESOLVED and timeline:
        end_time = timeline[-1].timestamp

    return IncidentRecord(
        id=incident_id,
        title=title,
        severity=severity,
        status=status,
        start_time=start_time,
        end_time=end_time,
        description=description,
        impacted_services=impacted_services or [],
        timeline=timeline,
    )
