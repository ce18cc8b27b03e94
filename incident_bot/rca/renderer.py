"""Render template sections into Confluence storage-format fragments.

Renderers are looked up by the section's stable ``key``, never by its display
title. A section with neither a renderer nor literal content produces an
empty fragment flagged ``supported=False`` so callers can see what was
skipped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from typing import Callable

from incident_bot.incidents.models import IncidentRecord, TimelineEntry
from incident_bot.rca.templates import SectionKind, TemplateSection

ONGOING = "Ongoing"


@dataclass(frozen=True)
class Fragment:
    key: str
    markup: str
    supported: bool = True


def _e(value: object) -> str:
    return escape(str(value), quote=True)


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2024-01-10T10:00:00.000Z."""
    return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def _utc(value: datetime) -> str:
    return format_timestamp(value.astimezone(timezone.utc))


def _render_overview(section: TemplateSection, record: IncidentRecord) -> str:
    end_time = _utc(record.end_time) if record.end_time else ONGOING
    services = "".join(f"<li>{_e(service)}</li>" for service in record.impacted_services)
    return (
        f"<h1>{_e(section.title)}</h1>"
        f"<p><strong>Severity:</strong> {_e(record.severity.value)}</p>"
        f"<p><strong>Start Time:</strong> {_utc(record.start_time)}</p>"
        f"<p><strong>End Time:</strong> {end_time}</p>"
        "<p><strong>Impacted Services:</strong></p>"
        f"<ul>{services}</ul>"
    )


def _render_impact(section: TemplateSection, record: IncidentRecord) -> str:
    if not record.description:
        return ""
    return f"<h2>{_e(section.title)}</h2><p>{_e(record.description)}</p>"


def _timeline_row(entry: TimelineEntry) -> str:
    return (
        "<tr>"
        f"<td>{_utc(entry.timestamp)}</td>"
        f"<td>{_e(entry.user)}</td>"
        f"<td>{_e(entry.action)}</td>"
        f"<td>{_e(entry.details)}</td>"
        "</tr>"
    )


def _render_timeline(section: TemplateSection, record: IncidentRecord) -> str:
    rows = "".join(_timeline_row(entry) for entry in record.timeline)
    return (
        "<table><thead><tr>"
        "<th>Time</th><th>User</th><th>Action</th><th>Details</th>"
        f"</tr></thead><tbody>{rows}</tbody></table>"
    )


SectionRenderer = Callable[[TemplateSection, IncidentRecord], str]

RENDERERS: dict[str, SectionRenderer] = {
    "overview": _render_overview,
    "impact": _render_impact,
    "timeline": _render_timeline,
}

_HEADING_TAGS = {
    SectionKind.HEADING1: "h1",
    SectionKind.HEADING2: "h2",
    SectionKind.HEADING3: "h3",
}


def _render_literal(section: TemplateSection) -> str:
    content = _e(section.content)
    if section.kind in _HEADING_TAGS:
        tag = _HEADING_TAGS[section.kind]
        return f"<{tag}>{_e(section.title)}</{tag}><p>{content}</p>"
    if section.kind == SectionKind.CODE:
        # CDATA cannot contain its own terminator
        code = section.content.replace("]]>", "]]]]><![CDATA[>")
        return (
            '<ac:structured-macro ac:name="code"><ac:plain-text-body>'
            f"<![CDATA[{code}]]>"
            "</ac:plain-text-body></ac:structured-macro>"
        )
    if section.kind == SectionKind.NOTE:
        return info_macro(content)
    if section.kind == SectionKind.TABLE:
        return f"<table><tbody><tr><td>{content}</td></tr></tbody></table>"
    return f"<p>{content}</p>"


def info_macro(escaped_body: str) -> str:
    return (
        '<ac:structured-macro ac:name="info"><ac:rich-text-body>'
        f"{escaped_body}"
        "</ac:rich-text-body></ac:structured-macro>"
    )


def render_section(section: TemplateSection, record: IncidentRecord) -> Fragment:
    renderer = RENDERERS.get(section.key)
    if renderer is not None:
        return Fragment(section.key, renderer(section, record))
    if section.content is not None:
        return Fragment(section.key, _render_literal(section))
    return Fragment(section.key, "", supported=False)
