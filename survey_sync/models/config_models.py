from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the survey response uploader.

These are the typed form of config/upload.yml after validation by
survey_sync.config.loader.
"""

DEFAULT_PRIMARY_COLLECTION = "afsdc_questionresponseinstance"
DEFAULT_ALTERNATE_COLLECTION = "afsdc_questionresponseinstances"
DEFAULT_KEY_FIELD = "afsdc_name"
DEFAULT_ID_FIELD = "afsdc_questionresponseinstanceid"
DEFAULT_RESPONSE_FIELD = "afsdc_response"
DEFAULT_NOTES_FIELD = "afsdc_comments"


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection configuration (postgres backend).

    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class DataverseConfig:
    """Dataverse Web API configuration (dataverse backend).

    base_url is the Web API root, e.g. https://org.crm.dynamics.com/api/data/v9.2
    """
    base_url: str | None = None
    token: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class CollectionMapping:
    """Where records live in the remote store and which fields they update."""
    primary_collection: str = DEFAULT_PRIMARY_COLLECTION
    alternate_collection: str | None = DEFAULT_ALTERNATE_COLLECTION  # Schema drift fallback
    key_field: str = DEFAULT_KEY_FIELD  # Natural key matched against record.id
    id_field: str = DEFAULT_ID_FIELD  # Entity identifier used for updates
    response_field: str = DEFAULT_RESPONSE_FIELD
    notes_field: str = DEFAULT_NOTES_FIELD


@dataclass(frozen=True)
class UploadConfig:
    """Root configuration object for an upload run."""
    backend: str  # "dataverse" | "postgres"
    mapping: CollectionMapping
    dataverse: DataverseConfig
    database: DatabaseConfig
    sheet_name: str | None = None  # None -> first visible sheet
