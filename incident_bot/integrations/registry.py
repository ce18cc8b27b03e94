"""Construct every external integration once at startup.

Each integration is wrapped in a ``Capability``: when its configuration is
incomplete the capability is unavailable, a warning is logged and the rest
of the bot keeps working. Command handlers check ``available`` before use.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

import structlog

from incident_bot.ai.client import LLMClient
from incident_bot.config import Settings
from incident_bot.errors import ConfigurationError
from incident_bot.integrations.confluence.client import ConfluenceClient
from incident_bot.integrations.jira.client import JiraClient
from incident_bot.rca.publisher import RcaPublisher
from incident_bot.rca.templates import TemplateCatalog
from incident_bot.slack.client import SlackClient

log = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class Capability(Generic[T]):
    name: str
    client: T | None = None
    missing: tuple[str, ...] = ()

    @property
    def available(self) -> bool:
        return self.client is not None

    def get(self) -> T:
        if self.client is None:
            raise ConfigurationError(list(self.missing))
        return self.client


@dataclass
class Integrations:
    slack: Capability[SlackClient]
    llm: Capability[LLMClient]
    jira: Capability[JiraClient]
    confluence: Capability[ConfluenceClient]
    catalog: TemplateCatalog = field(default_factory=TemplateCatalog.default)
    summary_channel_id: str = ""
    jira_project_key: str = ""
    confluence_space_key: str = ""
    confluence_parent_page_id: str | None = None

    def publisher(self) -> RcaPublisher:
        return RcaPublisher(self.confluence.get(), self.catalog)


def _capability(name: str, factory: Callable[[], T]) -> Capability[T]:
    try:
        client = factory()
    except ConfigurationError as exc:
        log.warning("integration_unavailable", integration=name, missing=exc.missing)
        return Capability(name, missing=tuple(exc.missing))
    log.info("integration_ready", integration=name)
    return Capability(name, client=client)


def build_integrations(settings: Settings) -> Integrations:
    def slack() -> SlackClient:
        settings.require("slack_bot_token", "slack_signing_secret")
        return SlackClient(settings.slack_bot_token)

    def llm() -> LLMClient:
        settings.require("anthropic_api_key")
        return LLMClient(settings.anthropic_api_key, settings.llm_model, settings.llm_max_tokens)

    def jira() -> JiraClient:
        settings.require("jira_base_url", "jira_email", "jira_api_token", "jira_project_key")
        return JiraClient(settings.jira_base_url, settings.jira_email, settings.jira_api_token)

    def confluence() -> ConfluenceClient:
        settings.require(
            "confluence_base_url",
            "confluence_email",
            "confluence_api_token",
            "confluence_space_key",
        )
        return ConfluenceClient(
            settings.confluence_base_url,
            settings.confluence_email,
            settings.confluence_api_token,
        )

    return Integrations(
        slack=_capability("slack", slack),
        llm=_capability("llm", llm),
        jira=_capability("jira", jira),
        confluence=_capability("confluence", confluence),
        catalog=TemplateCatalog.default(settings.confluence_space_key),
        summary_channel_id=settings.summary_channel_id,
        jira_project_key=settings.jira_project_key,
        confluence_space_key=settings.confluence_space_key,
        confluence_parent_page_id=settings.confluence_parent_page_id or None,
    )
