from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Credentials

DEFAULT_ACCOUNT_INFO_URL = "https://chaos2.aa.net.uk/broadband/info"


class Settings(BaseSettings):
    login: str = ""
    password: str = ""
    service: str = ""
    account_info_url: str = DEFAULT_ACCOUNT_INFO_URL
    port: int = 8080

    # Any non-empty stage switches logs to JSON lines
    up_stage: str = ""
    log_level: str = "INFO"
    log_file: str = ""
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 3

    metrics_enabled: bool = False
    metrics_namespace: str = "prazespeed"
    aws_region: str = "ap-southeast-1"
    aws_profile: str = ""
    graph_title: str = "Line {metric} speeds over 10 months"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore", env_ignore_empty=True)

    @field_validator("login", "password", "service", "up_stage", "aws_profile", mode="before")
    @classmethod
    def none_to_empty(cls, value) -> str:
        if value is None:
            return ""
        return str(value)

    def credentials(self) -> Credentials:
        """Build the upstream login for a single request."""
        return Credentials(login=self.login, secret=self.password, service_id=self.service)


@lru_cache
def get_settings() -> Settings:
    return Settings()
