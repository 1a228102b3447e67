"""Connection settings loaded from environment variables.

The facade, the FastAPI lifespan and ad-hoc scripts all read CouchDB
credentials from this one typed source.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed environment-backed configuration for the CouchDB facade."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    couchdb_url: str = Field(default="http://localhost:5984", alias="COUCHDB_URL")
    couchdb_username: str = Field(default="", alias="COUCHDB_USERNAME")
    couchdb_password: str = Field(default="", alias="COUCHDB_PASSWORD")
    couchdb_timeout_seconds: float = Field(default=30.0, alias="COUCHDB_TIMEOUT_SECONDS")
    couchdb_find_limit: int = Field(default=10000, alias="COUCHDB_FIND_LIMIT")
    couchdb_databases: str = Field(default="", alias="COUCHDB_DATABASES")


def parse_database_list(raw: str) -> list[str]:
    """Parse comma-separated database names into a trimmed list."""

    values = [item.strip() for item in raw.split(",")]
    return [item for item in values if item]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance for the current process."""

    return Settings()
