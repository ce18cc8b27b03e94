class IncidentBotError(Exception):
    pass


class ConfigurationError(IncidentBotError):
    """A required environment value is missing for an integration."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing configuration: {', '.join(missing)}")


class RemoteApiError(IncidentBotError):
    """Non-success response or transport failure from an external API."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service}: {message}")


class ValidationError(IncidentBotError):
    """Malformed command arguments. The message is the usage hint."""

    def __init__(self, usage: str) -> None:
        self.usage = usage
        super().__init__(usage)
