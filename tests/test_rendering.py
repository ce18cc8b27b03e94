from datetime import datetime, timedelta, timezone

import pytest

from incident_bot.incidents.models import IncidentStatus, TimelineEntry
from incident_bot.rca.assembler import assemble
from incident_bot.rca.renderer import format_timestamp, render_section
from incident_bot.rca.templates import (
    SectionKind,
    Template,
    TemplateCatalog,
    TemplateNotFound,
    TemplateSection,
)

OVERVIEW = TemplateSection(key="overview", title="Incident Overview", kind=SectionKind.HEADING1)
IMPACT = TemplateSection(key="impact", title="Impact", kind=SectionKind.HEADING2)
TIMELINE = TemplateSection(key="timeline", title="Timeline", kind=SectionKind.HEADING2)


class TestTemplateCatalog:
    def test_rca_template_sections(self):
        template = TemplateCatalog.default("ENG").lookup("rca")
        assert template.name == "Root Cause Analysis"
        assert template.space_key == "ENG"
        assert template.labels == ("incident", "rca")
        assert [s.title for s in template.sections] == [
            "Incident Overview",
            "Resolution",
            "Prevention",
            "Lessons Learned",
        ]
        assert [c.title for c in template.sections[0].children] == [
            "Impact",
            "Timeline",
            "Root Cause",
        ]

    def test_unknown_template(self):
        with pytest.raises(TemplateNotFound):
            TemplateCatalog.default().lookup("postmortem")


class TestOverview:
    def test_ongoing_when_end_time_missing(self, incident):
        incident = incident.model_copy(update={"status": IncidentStatus.RESOLVED})
        fragment = render_section(OVERVIEW, incident)
        assert "<p><strong>End Time:</strong> Ongoing</p>" in fragment.markup

    def test_end_time_rendered_when_present(self, incident):
        incident = incident.model_copy(
            update={"end_time": datetime(2024, 1, 10, 14, 30, tzinfo=timezone.utc)}
        )
        fragment = render_section(OVERVIEW, incident)
        assert "<p><strong>End Time:</strong> 2024-01-10T14:30:00.000Z</p>" in fragment.markup

    def test_full_markup(self, incident):
        assert render_section(OVERVIEW, incident).markup == (
            "<h1>Incident Overview</h1>"
            "<p><strong>Severity:</strong> P1</p>"
            "<p><strong>Start Time:</strong> 2024-01-10T10:00:00.000Z</p>"
            "<p><strong>End Time:</strong> Ongoing</p>"
            "<p><strong>Impacted Services:</strong></p>"
            "<ul><li>auth-service</li><li>api-gateway</li></ul>"
        )

    def test_empty_services_render_empty_list(self, incident):
        incident = incident.model_copy(update={"impacted_services": []})
        assert "<ul></ul>" in render_section(OVERVIEW, incident).markup

    def test_service_names_escaped(self, incident):
        incident = incident.model_copy(update={"impacted_services": ["<b>db</b>"]})
        assert "<li>&lt;b&gt;db&lt;/b&gt;</li>" in render_section(OVERVIEW, incident).markup


class TestImpact:
    def test_description_is_escaped(self, incident):
        incident = incident.model_copy(update={"description": "Login <failed> for 'admin' & others"})
        assert render_section(IMPACT, incident).markup == (
            "<h2>Impact</h2>"
            "<p>Login &lt;failed&gt; for &#x27;admin&#x27; &amp; others</p>"
        )

    def test_empty_description_renders_nothing(self, incident):
        incident = incident.model_copy(update={"description": ""})
        fragment = render_section(IMPACT, incident)
        assert fragment.markup == ""
        assert fragment.supported is True


class TestTimelineTable:
    def test_one_row_per_entry_in_input_order(self, incident):
        # Deliberately out of chronological order: the renderer must not re-sort.
        entries = list(reversed(incident.timeline))
        incident = incident.model_copy(update={"timeline": entries})
        markup = render_section(TIMELINE, incident).markup

        assert markup.count("<tr><td>") == 2
        assert markup.index("alice") < markup.index("monitoring")
        assert "<th>Time</th><th>User</th><th>Action</th><th>Details</th>" in markup

    def test_timestamps_are_utc_iso8601(self, incident):
        plus_two = timezone(timedelta(hours=2))
        entry = TimelineEntry(
            timestamp=datetime(2024, 1, 10, 12, 0, 0, 250000, tzinfo=plus_two),
            user="bob",
            action="Update",
            details="x",
        )
        incident = incident.model_copy(update={"timeline": [entry]})
        assert "<td>2024-01-10T10:00:00.250Z</td>" in render_section(TIMELINE, incident).markup

    def test_empty_timeline(self, incident):
        incident = incident.model_copy(update={"timeline": []})
        markup = render_section(TIMELINE, incident).markup
        assert "<tbody></tbody>" in markup

    def test_details_escaped(self, incident):
        entry = TimelineEntry(
            timestamp=datetime(2024, 1, 10, tzinfo=timezone.utc),
            user='"eve"',
            action="Update & more",
            details="<script>alert(\"x\") & 'y'</script>",
        )
        incident = incident.model_copy(update={"timeline": [entry]})
        markup = render_section(TIMELINE, incident).markup

        assert (
            "<td>&lt;script&gt;alert(&quot;x&quot;) &amp; &#x27;y&#x27;&lt;/script&gt;</td>"
            in markup
        )
        assert "<td>&quot;eve&quot;</td>" in markup
        assert "<td>Update &amp; more</td>" in markup
        for cell in markup.split("<td>")[1:]:
            text = cell.split("</td>")[0]
            for char in "<>\"'":
                assert char not in text
            assert "&" not in text.replace("&amp;", "").replace("&lt;", "").replace(
                "&gt;", ""
            ).replace("&quot;", "").replace("&#x27;", "")


class TestUnsupportedSections:
    def test_unknown_key_renders_nothing(self, incident):
        section = TemplateSection(key="resolution", title="Resolution", kind=SectionKind.HEADING1)
        fragment = render_section(section, incident)
        assert fragment.markup == ""
        assert fragment.supported is False

    def test_dispatch_ignores_display_title(self, incident):
        section = TemplateSection(key="custom", title="Incident Overview", kind=SectionKind.HEADING1)
        assert render_section(section, incident).supported is False

    def test_literal_content_rendered_by_kind(self, incident):
        note = TemplateSection(key="disclaimer", title="Note", kind=SectionKind.NOTE, content="a < b")
        paragraph = TemplateSection(key="intro", title="Intro", kind=SectionKind.PARAGRAPH, content="hi")
        heading = TemplateSection(key="h", title="Owners", kind=SectionKind.HEADING2, content="SRE")

        assert render_section(note, incident).markup == (
            '<ac:structured-macro ac:name="info"><ac:rich-text-body>'
            "a &lt; b"
            "</ac:rich-text-body></ac:structured-macro>"
        )
        assert render_section(paragraph, incident).markup == "<p>hi</p>"
        assert render_section(heading, incident).markup == "<h2>Owners</h2><p>SRE</p>"


class TestAssemble:
    def test_rca_document(self, incident):
        template = TemplateCatalog.default().lookup("rca")
        document = assemble(template, incident)

        assert document.template_id == "rca"
        assert "<strong>Severity:</strong> P1" in document.body
        assert "<li>auth-service</li>" in document.body
        assert "<li>api-gateway</li>" in document.body
        assert "<p>Service outage affecting user authentication</p>" in document.body
        assert document.body.count("<tr><td>") == 2
        assert document.body.index("<h1>Incident Overview</h1>") < document.body.index("<table>")
        assert "Resolution" not in document.body
        assert "Prevention" not in document.body
        assert "Lessons Learned" not in document.body
        assert {"resolution", "prevention", "lessons_learned"} <= set(document.unsupported)
        assert "overview" not in document.unsupported
        assert "timeline" not in document.unsupported

    def test_deterministic(self, incident):
        template = TemplateCatalog.default().lookup("rca")
        assert assemble(template, incident).body == assemble(template, incident).body

    def test_sections_concatenated_in_declared_order(self, incident):
        template = Template(
            id="custom",
            name="Custom",
            sections=(
                TemplateSection(key="a", title="A", kind=SectionKind.PARAGRAPH, content="first"),
                TemplateSection(
                    key="b",
                    title="B",
                    kind=SectionKind.PARAGRAPH,
                    content="second",
                    children=(
                        TemplateSection(key="c", title="C", kind=SectionKind.PARAGRAPH, content="third"),
                    ),
                ),
                TemplateSection(key="d", title="D", kind=SectionKind.PARAGRAPH, content="fourth"),
            ),
        )
        document = assemble(template, incident)
        assert document.body == "<p>first</p><p>second</p><p>third</p><p>fourth</p>"
        assert document.unsupported == []


def test_format_timestamp():
    value = datetime(2024, 1, 10, 10, 0, 5, 123456, tzinfo=timezone.utc)
    assert format_timestamp(value) == "2024-01-10T10:00:05.123Z"


def test_format_timestamp_pads_early_years():
    assert format_timestamp(datetime(5, 3, 1, 9, 4, 2)) == "0005-03-01T09:04:02.000Z"
