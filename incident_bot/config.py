from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from incident_bot.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_app_token: str = ""
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 1024
    summary_channel_id: str = ""
    jira_base_url: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    jira_project_key: str = ""
    confluence_base_url: str = ""
    confluence_email: str = ""
    confluence_api_token: str = ""
    confluence_space_key: str = ""
    confluence_parent_page_id: str = ""

    @model_validator(mode="after")
    def _confluence_email_fallback(self) -> "Settings":
        if not self.confluence_email:
            self.confluence_email = self.jira_email
        return self

    def require(self, *fields: str) -> None:
        missing = [name.upper() for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationError(missing)


settings = Settings()
