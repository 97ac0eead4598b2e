"""Domain models for the survey response uploader."""

from .config_models import CollectionMapping, DatabaseConfig, DataverseConfig, UploadConfig
from .outcome import BatchSummary, LookupResult, LookupStatus, OutcomeKind, UpdateOutcome
from .record import NormalizedRecord

__all__ = [
    # Configuration models
    "CollectionMapping",
    "DatabaseConfig",
    "DataverseConfig",
    "UploadConfig",
    # Processing models
    "NormalizedRecord",
    "UpdateOutcome",
    "OutcomeKind",
    "BatchSummary",
    "LookupResult",
    "LookupStatus",
]
