import httpx
import structlog

from incident_bot.integrations.http import send

log = structlog.get_logger()

SERVICE = "jira"


def adf_document(text: str) -> dict:
    """Wrap plain text in a single-paragraph Atlassian Document Format doc."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


class JiraClient:
    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.site_url = base_url.rstrip("/")
        self.base_url = f"{self.site_url}/rest/api/3"
        self.auth = (email, api_token)
        self.transport = transport

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await send(
            SERVICE,
            method,
            f"{self.base_url}{path}",
            auth=self.auth,
            transport=self.transport,
            **kwargs,
        )

    def issue_url(self, issue_key: str) -> str:
        return f"{self.site_url}/browse/{issue_key}"

    async def create_issue(
        self,
        project_key: str,
        summary: str,
        description: str,
        issue_type: str = "Incident",
    ) -> str:
        resp = await self._send(
            "POST",
            "/issue",
            json={
                "fields": {
                    "project": {"key": project_key},
                    "summary": summary,
                    "description": adf_document(description),
                    "issuetype": {"name": issue_type},
                }
            },
        )
        issue_key = resp.json()["key"]
        log.info("jira_issue_created", key=issue_key, project=project_key)
        return issue_key

    async def update_issue(self, issue_key: str, description: str) -> None:
        await self._send(
            "PUT",
            f"/issue/{issue_key}",
            json={"fields": {"description": adf_document(description)}},
        )

    async def add_comment(self, issue_key: str, text: str) -> None:
        await self._send(
            "POST",
            f"/issue/{issue_key}/comment",
            json={"body": adf_document(text)},
        )
