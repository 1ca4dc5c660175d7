"""
petstore_orders.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed settings from env vars and a TOML config file.
- Compose the database connection string from the `[db]` section.
- Hide secrets from repr/logging (DB password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from petstore_orders import __version__

DEFAULT_CONFIG_FILE = "configs/config.toml"


class DbSettings(BaseModel):
    # `url` is host[:port]/database; credentials are kept separate as in the config file.
    url: str = "localhost:5432/petstore"
    user: str = "postgres"
    pwd: str = Field(default="postgres", repr=False)

    # Pool sizing and timeouts.
    max_connections: int = Field(default=5, ge=1)
    acquire_timeout_ms: int = Field(default=300, ge=1)
    idle_timeout_s: float | None = None
    max_lifetime_s: float | None = None
    echo: bool = False


class Settings(BaseSettings):
    """
    Service configuration.

    Precedence (highest first): init kwargs, `PETSTORE_*` env vars, the TOML file.
    Nested fields use `__`, e.g. `PETSTORE_DB__MAX_CONNECTIONS=10`.
    """

    model_config = SettingsConfigDict(
        env_prefix="PETSTORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "petstore-orders"
    version: str = __version__
    log_level: str = "INFO"

    api_host: str = "127.0.0.1"
    api_port: int = 8080

    # "sql" talks to the database through the pool; "memory" keeps orders in-process.
    storage: Literal["sql", "memory"] = "sql"

    db: DbSettings = Field(default_factory=DbSettings)
    # Full SQLAlchemy URL; overrides the one composed from `db` (e.g. sqlite+aiosqlite for dev).
    database_url: str | None = Field(default=None, repr=False)

    @property
    def db_dsn(self) -> str:
        if self.database_url:
            return self.database_url
        user = quote(self.db.user, safe="")
        pwd = quote(self.db.pwd, safe="")
        return f"postgresql+asyncpg://{user}:{pwd}@{self.db.url}"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # The config file location itself comes from the environment.
        toml_file = os.environ.get("PETSTORE_CONFIG_FILE", DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-reading env vars and the config file for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# A missing config file is not an error: defaults and env vars still apply, which
# keeps containerized deployments (env-only) and local runs (file) on one code path.
