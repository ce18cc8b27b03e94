from html import escape

import httpx
import structlog

from incident_bot.errors import RemoteApiError
from incident_bot.integrations.http import send
from incident_bot.rca.renderer import info_macro

log = structlog.get_logger()

SERVICE = "confluence"


def _storage(value: str) -> dict:
    return {"storage": {"value": value, "representation": "storage"}}


def _json(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        raise RemoteApiError(
            SERVICE, "response body is not a JSON object", resp.status_code, resp.text
        )
    return data


class ConfluenceClient:
    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.site_url = base_url.rstrip("/")
        self.base_url = f"{self.site_url}/wiki/rest/api"
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

    def page_url(self, space_key: str, page_id: str) -> str:
        return f"{self.site_url}/wiki/spaces/{space_key}/pages/{page_id}"

    async def create_page(
        self,
        space_key: str,
        title: str,
        body: str,
        labels: list[str] | None = None,
        parent_id: str | None = None,
    ) -> str:
        payload: dict = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": _storage(body),
            "metadata": {
                "labels": [{"prefix": "global", "name": label} for label in labels or []]
            },
        }
        if parent_id:
            payload["ancestors"] = [{"id": parent_id}]

        resp = await self._send("POST", "/content", json=payload)
        page_id = _json(resp).get("id")
        if not page_id:
            raise RemoteApiError(SERVICE, "created page has no id", resp.status_code, resp.text)
        page_id = str(page_id)
        log.info("confluence_page_created", page_id=page_id, space_key=space_key)
        return page_id

    async def get_page(self, page_id: str) -> dict:
        resp = await self._send(
            "GET", f"/content/{page_id}", params={"expand": "version,metadata.labels"}
        )
        return _json(resp)

    async def update_page(self, page_id: str, title: str, body: str, version: int) -> None:
        """Replace the page body. ``version`` is the current version; the
        request carries ``version + 1`` and Confluence rejects it with 409 if
        the page moved on in the meantime."""
        await self._send(
            "PUT",
            f"/content/{page_id}",
            json={
                "version": {"number": version + 1},
                "title": title,
                "type": "page",
                "body": _storage(body),
            },
        )
        log.info("confluence_page_updated", page_id=page_id, version=version + 1)

    async def add_comment(self, page_id: str, text: str) -> None:
        await self._send(
            "POST",
            f"/content/{page_id}/child/comment",
            json={
                "type": "comment",
                "container": {"id": page_id, "type": "page"},
                "body": _storage(info_macro(escape(text, quote=True))),
            },
        )

    async def add_attachment(self, page_id: str, data: bytes, filename: str) -> None:
        await self._send(
            "POST",
            f"/content/{page_id}/child/attachment",
            headers={"X-Atlassian-Token": "no-check"},
            files={"file": (filename, data)},
        )
        log.info("confluence_attachment_added", page_id=page_id, filename=filename)
