from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SectionKind(str, Enum):
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    PARAGRAPH = "paragraph"
    TABLE = "table"
    CODE = "code"
    NOTE = "note"


class TemplateSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    kind: SectionKind
    content: str | None = None
    children: tuple["TemplateSection", ...] = ()


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    space_key: str = ""
    labels: tuple[str, ...] = ()
    sections: tuple[TemplateSection, ...] = Field(default_factory=tuple)


class TemplateNotFound(LookupError):
    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


def _heading(key: str, title: str, *children: TemplateSection) -> TemplateSection:
    return TemplateSection(key=key, title=title, kind=SectionKind.HEADING1, children=children)


def _subheading(key: str, title: str) -> TemplateSection:
    return TemplateSection(key=key, title=title, kind=SectionKind.HEADING2)


def rca_template(space_key: str = "") -> Template:
    return Template(
        id="rca",
        name="Root Cause Analysis",
        space_key=space_key,
        labels=("incident", "rca"),
        sections=(
            _heading(
                "overview",
                "Incident Overview",
                _subheading("impact", "Impact"),
                _subheading("timeline", "Timeline"),
                _subheading("root_cause", "Root Cause"),
            ),
            _heading(
                "resolution",
                "Resolution",
                _subheading("actions_taken", "Actions Taken"),
                _subheading("verification", "Verification Steps"),
            ),
            _heading(
                "prevention",
                "Prevention",
                _subheading("immediate_actions", "Immediate Actions"),
                _subheading("long_term", "Long-term Improvements"),
                _subheading("monitoring", "Monitoring & Alerts"),
            ),
            _heading(
                "lessons_learned",
                "Lessons Learned",
                _subheading("went_well", "What Went Well"),
                _subheading("needs_improvement", "What Needs Improvement"),
                _subheading("action_items", "Action Items"),
            ),
        ),
    )


class TemplateCatalog:
    """Read-only registry of document templates, built once at startup."""

    def __init__(self, templates: list[Template]) -> None:
        self._templates = {template.id: template for template in templates}

    def lookup(self, template_id: str) -> Template:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    @classmethod
    def default(cls, space_key: str = "") -> "TemplateCatalog":
        return cls([rca_template(space_key)])
