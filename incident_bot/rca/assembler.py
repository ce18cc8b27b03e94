from dataclasses import dataclass, field
from typing import Iterator

from incident_bot.incidents.models import IncidentRecord
from incident_bot.rca.renderer import Fragment, render_section
from incident_bot.rca.templates import Template, TemplateSection


@dataclass(frozen=True)
class Document:
    template_id: str
    body: str
    unsupported: list[str] = field(default_factory=list)


def _walk(sections: tuple[TemplateSection, ...]) -> Iterator[TemplateSection]:
    for section in sections:
        yield section
        yield from _walk(section.children)


def render_fragments(template: Template, record: IncidentRecord) -> list[Fragment]:
    return [render_section(section, record) for section in _walk(template.sections)]


def assemble(template: Template, record: IncidentRecord) -> Document:
    """Render every section depth-first in declared order and join the markup."""
    fragments = render_fragments(template, record)
    return Document(
        template_id=template.id,
        body="".join(fragment.markup for fragment in fragments),
        unsupported=[fragment.key for fragment in fragments if not fragment.supported],
    )
