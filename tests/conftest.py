from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from incident_bot.ai.client import LLMClient
from incident_bot.incidents.models import IncidentRecord, Severity, TimelineEntry
from incident_bot.integrations.confluence.client import ConfluenceClient
from incident_bot.integrations.jira.client import JiraClient
from incident_bot.integrations.registry import Capability, Integrations
from incident_bot.rca.templates import TemplateCatalog
from incident_bot.slack.client import SlackClient


@pytest.fixture
def incident() -> IncidentRecord:
    return IncidentRecord(
        id="INC-42",
        title="Auth outage",
        severity=Severity.P1,
        start_time=datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc),
        description="Service outage affecting user authentication",
        impacted_services=["auth-service", "api-gateway"],
        timeline=[
            TimelineEntry(
                timestamp=datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc),
                user="monitoring",
                action="Error Report",
                details="High latency detected in auth-service",
            ),
            TimelineEntry(
                timestamp=datetime(2024, 1, 10, 10, 5, tzinfo=timezone.utc),
                user="alice",
                action="Investigation",
                details="Started investigating auth-service issues",
            ),
        ],
    )


@pytest.fixture
def make_integrations():
    """Build an ``Integrations`` bundle from mock clients; omitted ones are unavailable."""

    def _make(
        slack=None,
        llm=None,
        jira=None,
        confluence=None,
        **kwargs,
    ) -> Integrations:
        def cap(name, client):
            if client is None:
                return Capability(name, missing=(f"{name.upper()}_TOKEN",))
            return Capability(name, client=client)

        kwargs.setdefault("jira_project_key", "OPS")
        kwargs.setdefault("confluence_space_key", "ENG")
        return Integrations(
            slack=cap("slack", slack),
            llm=cap("llm", llm),
            jira=cap("jira", jira),
            confluence=cap("confluence", confluence),
            catalog=TemplateCatalog.default("ENG"),
            **kwargs,
        )

    return _make


@pytest.fixture
def slack_mock():
    slack = MagicMock(spec=SlackClient)
    slack.conversations_history.return_value = [
        {"user": "U2", "text": "Fixed the issue, error rate back to normal", "ts": "1704881100.000200"},
        {"user": "U1", "text": "Still investigating root cause", "ts": "1704880800.000100"},
    ]
    slack.post_message.return_value = {"ok": True, "ts": "1704881200.000100"}
    return slack


@pytest.fixture
def llm_mock():
    llm = MagicMock(spec=LLMClient)
    llm.complete.return_value = "Summary of the incident"
    return llm


@pytest.fixture
def jira_mock():
    jira = MagicMock(spec=JiraClient)
    jira.create_issue.return_value = "OPS-7"
    jira.issue_url.return_value = "https://acme.atlassian.net/browse/OPS-7"
    return jira


@pytest.fixture
def confluence_mock():
    confluence = MagicMock(spec=ConfluenceClient)
    confluence.create_page.return_value = "98765"
    confluence.page_url.return_value = "https://acme.atlassian.net/wiki/spaces/ENG/pages/98765"
    return confluence
