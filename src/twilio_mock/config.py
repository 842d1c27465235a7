"""
Mocker configuration with environment-driven settings.

Values load from OS env (``TWILIO_MOCK_*``) and an optional ``.env`` file, so a
CI job can pin the simulated account without touching test code.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCOUNT_SID = "AC" + "0" * 32


class TwilioMockConfig(BaseSettings):
    """Simulated account and matching options."""

    model_config = SettingsConfigDict(
        env_prefix="TWILIO_MOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Simulated account credentials
    account_sid: str = Field(
        default=DEFAULT_ACCOUNT_SID,
        description="Account SID expected in the URL and basic auth user",
    )
    auth_token: str = Field(
        default="test_auth_token",
        description="Auth token expected as basic auth password",
    )

    # Provider API shape
    host: str = Field(default="api.twilio.com")
    api_version: str = Field(default="2010-04-01")

    default_country: str = Field(default="US", min_length=2, max_length=2)

    # Behaviour toggles
    auto_stub: bool = Field(
        default=True,
        description="Install default stubs when the mocker starts.",
    )
    match_headers: bool = Field(
        default=True,
        description="Require the provider Accept headers on every request.",
    )
    passthrough_unknown_hosts: bool = Field(
        default=False,
        description="Let requests to other hosts reach the network.",
    )

    seed: int | None = Field(
        default=None,
        description="Seed for number and SID generation; random when unset.",
    )
    log_level: str = "INFO"

    @field_validator("default_country", mode="before")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def credentials(self) -> tuple[str, str]:
        return (self.account_sid, self.auth_token)

    @property
    def base_url(self) -> str:
        """Account-scoped base URL every simulated endpoint lives under."""
        return f"https://{self.host}/{self.api_version}/Accounts/{self.account_sid}"


def get_config() -> TwilioMockConfig:
    # Not cached: tests monkeypatch the environment between runs.
    return TwilioMockConfig()
