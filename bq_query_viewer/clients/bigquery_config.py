"""Configuration for the BigQuery job client."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from bq_query_viewer.config import Settings
from bq_query_viewer.rewriters.base import JobLocator


@dataclass(frozen=True)
class BigQueryClientConfig:
    """Connection settings for one BigQuery client.

    Built per job locator and passed explicitly; nothing is read from
    process-wide defaults.
    """

    project_id: str
    location: Optional[str] = None

    # Authentication (application default credentials when unset)
    credentials_path: Optional[Path] = None

    @classmethod
    def from_locator(
        cls, locator: JobLocator, settings: Optional[Settings] = None
    ) -> "BigQueryClientConfig":
        """Create config for the project and location a job ran in."""
        credentials = settings.google_application_credentials if settings else None
        return cls(
            project_id=locator.project_id,
            location=locator.location,
            credentials_path=Path(credentials) if credentials else None,
        )
