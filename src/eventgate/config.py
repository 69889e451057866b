"""Application configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventgate.errors import ConfigError

STREAM_BACKENDS = ("kinesis", "memory")
SCHEMA_GENERATIONS = ("compact", "expanded")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    stream_name: str = Field(alias="STREAM_NAME", default="")
    stream_backend: str = Field(alias="STREAM_BACKEND", default="kinesis")
    stream_region: str = Field(alias="STREAM_REGION", default="")
    stream_endpoint_url: str = Field(alias="STREAM_ENDPOINT_URL", default="")
    # tenant=stream pairs, comma separated
    stream_routes: str = Field(alias="STREAM_ROUTES", default="")

    schema_generation: str = Field(alias="SCHEMA_GENERATION", default="compact")
    default_project_id: str = Field(alias="DEFAULT_PROJECT_ID", default="default")
    token_signing_secret: str = Field(alias="TOKEN_SIGNING_SECRET", default="")

    rate_limit_ingest_per_minute: int = Field(alias="RATE_LIMIT_INGEST_PER_MINUTE", default=6000)

    bind_host: str = Field(alias="BIND_HOST", default="127.0.0.1")
    bind_port: int = Field(alias="BIND_PORT", default=8000)


def parse_stream_routes(raw: str) -> dict[str, str]:
    routes: dict[str, str] = {}
    for item in raw.split(","):
        entry = item.strip()
        if not entry:
            continue
        tenant, sep, stream = entry.partition("=")
        tenant = tenant.strip()
        stream = stream.strip()
        if not sep or not tenant or not stream:
            raise ConfigError(f"invalid STREAM_ROUTES entry: {entry!r}")
        routes[tenant] = stream
    return routes


def validate_settings(settings: Settings) -> None:
    missing: list[str] = []
    if not settings.stream_name.strip():
        missing.append("STREAM_NAME")
    if settings.stream_backend not in STREAM_BACKENDS:
        missing.append(f"STREAM_BACKEND(one of {', '.join(STREAM_BACKENDS)})")
    if settings.schema_generation not in SCHEMA_GENERATIONS:
        missing.append(f"SCHEMA_GENERATION(one of {', '.join(SCHEMA_GENERATIONS)})")
    if not settings.default_project_id.strip():
        missing.append("DEFAULT_PROJECT_ID")
    if settings.rate_limit_ingest_per_minute < 0:
        missing.append("RATE_LIMIT_INGEST_PER_MINUTE(non-negative)")
    try:
        parse_stream_routes(settings.stream_routes)
    except ConfigError:
        missing.append("STREAM_ROUTES(tenant=stream pairs)")
    if settings.app_env == "prod" and settings.stream_backend == "memory":
        missing.append("STREAM_BACKEND(memory not allowed in prod)")

    if missing:
        keys = ", ".join(sorted(set(missing)))
        raise ConfigError(f"invalid configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
