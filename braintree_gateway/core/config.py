import warnings
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION = "production"
SANDBOX = "sandbox"

Environment = Literal["production", "sandbox"]


def normalize_environment(value: Any) -> str:
    """
    Collapse any environment input onto one of the two values the SDK accepts.

    Only the exact string "production" selects production; anything else,
    including a missing value, falls back to the sandbox.
    """
    return PRODUCTION if value == PRODUCTION else SANDBOX


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BRAINTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    environment: Environment = Field(default=SANDBOX, description="Braintree environment: 'production' or 'sandbox'")
    merchant_id: str = Field(default="")
    merchant_account_id: Optional[str] = Field(default=None, description="Only sent to the gateway when non-blank")
    public_key: str = Field(default="")
    private_key: str = Field(default="")
    client_side_encryption_key: Optional[str] = Field(default=None, description="Braintree.js form encryption key")

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment_value(cls, value: Any) -> str:
        return normalize_environment(value)

    @model_validator(mode="after")
    def check_production_credentials(self) -> "GatewaySettings":
        """
        Warn when production is selected without a full credential set.

        Missing credentials are not rejected here: the gateway reports them
        on the first API call.
        """
        if self.environment == PRODUCTION:
            missing = [
                name
                for name in ("merchant_id", "public_key", "private_key")
                if not getattr(self, name).strip()
            ]
            if missing:
                warnings.warn(
                    f"Braintree production environment selected but {', '.join(missing)} "
                    f"{'is' if len(missing) == 1 else 'are'} blank.",
                    UserWarning,
                )
        return self


@lru_cache(maxsize=None)
def get_settings() -> GatewaySettings:
    """
    Get cached gateway settings.

    Returns:
        GatewaySettings: The cached settings instance
    """
    return GatewaySettings()


def clear_settings_cache() -> None:
    """
    Clear the cached settings instance.

    The next call to get_settings() re-reads the environment.
    """
    get_settings.cache_clear()
