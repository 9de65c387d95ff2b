from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Documented metadata server IP address.
METADATA_IP = "169.254.169.254"
USER_AGENT = "gce-metadata-python/v1"


class MetadataConfig(BaseSettings):
    """Settings for MetadataClient, read from `GCE_METADATA_*` environment variables."""

    model_config = SettingsConfigDict(env_prefix="GCE_METADATA_", env_ignore_empty=True)

    host: str = Field(METADATA_IP, description="Metadata server host (and port).")
    # Short, so that off-GCE callers fail fast instead of hanging.
    timeout: float = Field(1.0, gt=0, description="Request timeout in seconds.")
    user_agent: str = Field(USER_AGENT, description="User-Agent sent with requests.")

    @field_validator("host", mode="before")
    @classmethod
    def default_blank_host(cls, v: str) -> str:
        if isinstance(v, str) and not v.strip():
            return METADATA_IP
        return v.strip() if isinstance(v, str) else v


class AppConfig(BaseSettings):
    throw_if_not_on_gce: bool = Field(False, validation_alias="THROW_IF_NOT_ON_GCE")
    bind_host: str = Field("0.0.0.0", validation_alias="BIND_HOST")
    port: int = Field(8080, validation_alias="PORT")
