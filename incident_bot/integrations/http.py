import httpx
import structlog

from incident_bot.errors import RemoteApiError

log = structlog.get_logger()

DEFAULT_TIMEOUT = 10


async def send(
    service: str,
    method: str,
    url: str,
    *,
    auth: tuple[str, str] | None = None,
    headers: dict | None = None,
    json: dict | None = None,
    params: dict | None = None,
    files: dict | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """Issue one request and raise ``RemoteApiError`` on anything but 2xx."""
    try:
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, transport=transport) as client:
            resp = await client.request(
                method,
                url,
                auth=auth,
                headers=headers,
                json=json,
                params=params,
                files=files,
            )
    except httpx.HTTPError as exc:
        log.error("remote_transport_error", service=service, url=url, error=str(exc))
        raise RemoteApiError(service, f"request failed: {exc}") from exc

    if not resp.is_success:
        log.error(
            "remote_api_error",
            service=service,
            url=url,
            status=resp.status_code,
            body=resp.text[:500],
        )
        raise RemoteApiError(
            service,
            f"{method} {url} returned {resp.status_code}",
            status_code=resp.status_code,
            body=resp.text,
        )
    return resp
