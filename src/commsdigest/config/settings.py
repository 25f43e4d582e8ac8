"""Configuration management for commsdigest using Pydantic Settings."""

from typing import Literal

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required credentials are missing or a setting is invalid."""

    def __init__(self, missing: list[str], invalid: dict[str, str] | None = None) -> None:
        self.missing = missing
        self.invalid = invalid or {}
        lines = [f"Missing {' or '.join(missing)}."] if missing else []
        lines.extend(f"Invalid {name}: {reason}" for name, reason in self.invalid.items())
        super().__init__("\n".join(lines))


class AttroveSettings(BaseSettings):
    """Attrove API credentials and endpoints."""

    model_config = SettingsConfigDict(env_prefix="ATTROVE_", env_file=".env", extra="ignore")

    # sk_ per-user key; the daily rundown reads this one first
    secret_key: SecretStr = SecretStr("")
    # sk_ user token; the agents read this one first
    user_token: SecretStr = SecretStr("")
    user_id: str = ""

    # Partner credentials, only used to provision users
    client_id: str = ""
    client_secret: SecretStr = SecretStr("")

    base_url: str = "https://api.attrove.com/v1"
    connect_url: str = "https://connect.attrove.com"

    # Seconds; unset means queries may wait indefinitely
    query_timeout: float | None = None

    def api_key(self, prefer: Literal["secret_key", "user_token"] = "user_token") -> str:
        """Return the per-user key, preferring the named variable."""
        first, second = (
            (self.secret_key, self.user_token)
            if prefer == "secret_key"
            else (self.user_token, self.secret_key)
        )
        return first.get_secret_value() or second.get_secret_value()

    def require_user(self, prefer: Literal["secret_key", "user_token"] = "user_token") -> None:
        """Raise ConfigurationError unless a per-user key and user id are set."""
        missing = []
        if not self.api_key(prefer):
            missing.append(f"ATTROVE_{prefer.upper()}")
        if not self.user_id:
            missing.append("ATTROVE_USER_ID")
        if missing:
            raise ConfigurationError(missing)

    def require_partner(self) -> None:
        """Raise ConfigurationError unless partner client credentials are set."""
        missing = []
        if not self.client_id:
            missing.append("ATTROVE_CLIENT_ID")
        if not self.client_secret.get_secret_value():
            missing.append("ATTROVE_CLIENT_SECRET")
        if missing:
            raise ConfigurationError(missing)


class ResendSettings(BaseSettings):
    """Resend email delivery settings."""

    model_config = SettingsConfigDict(env_prefix="RESEND_", env_file=".env", extra="ignore")

    api_key: SecretStr = SecretStr("")
    from_address: str = "Daily Rundown <digest@updates.attrove.com>"
    send_to: str = Field(default="", alias="SEND_TO")

    def require(self) -> None:
        """Raise ConfigurationError unless an API key and recipient are set."""
        missing = []
        if not self.api_key.get_secret_value():
            missing.append("RESEND_API_KEY")
        if not self.send_to:
            missing.append("SEND_TO")
        if missing:
            raise ConfigurationError(missing)


class Settings(BaseSettings):
    """Main commsdigest settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    demo_mode: bool = False

    # Sub-settings
    attrove: AttroveSettings = Field(default_factory=AttroveSettings)
    resend: ResendSettings = Field(default_factory=ResendSettings)



# Env prefix of each nested settings model, keyed by model and by field name
ENV_PREFIXES = {
    "AttroveSettings": "ATTROVE_",
    "ResendSettings": "RESEND_",
    "attrove": "ATTROVE_",
    "resend": "RESEND_",
}


def load_settings() -> Settings:
    """Read settings from the environment and ``.env``.

    Raises:
        ConfigurationError: A variable is set to a value that cannot be used,
            e.g. ``LOG_LEVEL=verbose``.
    """
    try:
        return Settings()
    except ValidationError as e:
        invalid = {}
        for error in e.errors():
            loc = [str(part) for part in error["loc"]]
            prefix = ENV_PREFIXES.get(e.title, "")
            if loc and loc[0] in ENV_PREFIXES:
                prefix = ENV_PREFIXES[loc.pop(0)]
            invalid[prefix + "_".join(loc).upper()] = error["msg"]
        raise ConfigurationError([], invalid) from e
