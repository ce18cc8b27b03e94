import structlog

from incident_bot.incidents.models import IncidentRecord, PublishMetadata
from incident_bot.errors import RemoteApiError
from incident_bot.integrations.confluence.client import SERVICE, ConfluenceClient
from incident_bot.rca.assembler import Document, assemble
from incident_bot.rca.templates import TemplateCatalog

log = structlog.get_logger()

DEFAULT_TEMPLATE = "rca"


class RcaPublisher:
    def __init__(self, confluence: ConfluenceClient, catalog: TemplateCatalog) -> None:
        self.confluence = confluence
        self.catalog = catalog

    def render(self, record: IncidentRecord, template_id: str = DEFAULT_TEMPLATE) -> Document:
        document = assemble(self.catalog.lookup(template_id), record)
        if document.unsupported:
            log.info(
                "rca_sections_without_content",
                incident_id=record.id,
                sections=document.unsupported,
            )
        return document

    async def create(self, record: IncidentRecord, metadata: PublishMetadata) -> str:
        template = self.catalog.lookup(metadata.template_id or DEFAULT_TEMPLATE)
        document = self.render(record, template.id)
        labels = list(dict.fromkeys([*template.labels, *metadata.labels]))

        page_id = await self.confluence.create_page(
            metadata.space_key or template.space_key,
            record.title,
            document.body,
            labels=labels,
            parent_id=metadata.parent_id,
        )
        await self.confluence.add_comment(
            page_id,
            "Created by Incident Bot\n"
            f"Template: {template.name}\n"
            f"Severity: {record.severity.value}\n"
            f"Status: {record.status.value}",
        )
        log.info("rca_published", incident_id=record.id, page_id=page_id)
        return page_id

    async def update(
        self,
        page_id: str,
        record: IncidentRecord,
        template_id: str = DEFAULT_TEMPLATE,
    ) -> None:
        document = self.render(record, template_id)
        page = await self.confluence.get_page(page_id)
        try:
            current_version = int(page["version"]["number"])
        except (KeyError, TypeError, ValueError):
            raise RemoteApiError(SERVICE, f"page {page_id} has no version number") from None
        await self.confluence.update_page(page_id, record.title, document.body, current_version)
        log.info("rca_updated", incident_id=record.id, page_id=page_id)
