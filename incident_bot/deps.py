from fastapi import Request

from incident_bot.integrations.registry import Integrations


def get_integrations(request: Request) -> Integrations:
    return request.app.state.integrations
