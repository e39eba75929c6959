"""BigQuery access for job metadata, child jobs and dataset listings."""

import asyncio
import logging
from typing import Any, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import bigquery
from google.oauth2 import service_account

from bq_query_viewer.clients.bigquery_config import BigQueryClientConfig
from bq_query_viewer.exceptions import JobNotFoundError, WarehouseAccessError
from bq_query_viewer.rewriters.base import DefaultDataset
from bq_query_viewer.utils.retry import (
    is_permission_error,
    is_retryable_google_error,
    retry_with_exponential_backoff,
)

logger = logging.getLogger(__name__)

NON_RETRYABLE_API_ERRORS = (
    google_exceptions.NotFound,
    google_exceptions.BadRequest,
    google_exceptions.Unauthorized,
)

# Mapped to WarehouseAccessError; requests transport errors are OSError subclasses
ACCESS_ERRORS = (
    google_exceptions.GoogleAPICallError,
    google_auth_exceptions.GoogleAuthError,
    OSError,
)


class BigQueryJobClient:
    """Thin async wrapper around google.cloud.bigquery.Client.

    The blocking client calls run in worker threads. Transient API errors are
    retried here; everything else is mapped to a QueryViewerError.
    """

    def __init__(
        self,
        config: BigQueryClientConfig,
        client: Optional[bigquery.Client] = None,
    ) -> None:
        self.config = config
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        """Create the underlying client on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> bigquery.Client:
        kwargs: dict[str, Any] = {
            "project": self.config.project_id,
            "location": self.config.location,
        }
        if self.config.credentials_path:
            kwargs["credentials"] = service_account.Credentials.from_service_account_file(
                str(self.config.credentials_path)
            )
            logger.info("Using service account credentials")
        else:
            logger.info("Using application default credentials")

        logger.debug(
            f"Creating BigQuery client for project {self.config.project_id} "
            f"in {self.config.location}"
        )
        return bigquery.Client(**kwargs)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    async def get_job(self, job_id: str) -> dict[str, Any]:
        """Fetch the raw REST resource of a job.

        Raises:
            JobNotFoundError: If the job does not exist in this project/location
            WarehouseAccessError: On credential, permission, transport or other API errors
        """
        try:
            return await self._get_job(job_id)
        except google_exceptions.NotFound as e:
            raise JobNotFoundError(job_id, self.config.project_id, self.config.location) from e
        except ACCESS_ERRORS as e:
            raise self._access_error(f"fetch job {job_id}", e) from e

    async def list_child_job_ids(self, parent_job_id: str) -> list[str]:
        """List the ids of all child jobs of a script job (auto-paginated)."""
        try:
            return await self._list_child_job_ids(parent_job_id)
        except ACCESS_ERRORS as e:
            raise self._access_error(f"list child jobs of {parent_job_id}", e) from e

    async def list_table_ids(self, dataset: DefaultDataset) -> list[str]:
        """List the table ids of a dataset (auto-paginated).

        The dataset is listed in its own project, which can differ from the
        project the job ran in.
        """
        try:
            return await self._list_table_ids(dataset)
        except ACCESS_ERRORS as e:
            raise self._access_error(f"list tables of {dataset.full_id}", e) from e

    @retry_with_exponential_backoff(
        max_retries=3,
        base_delay=1.0,
        max_delay=30.0,
        non_retryable_exceptions=NON_RETRYABLE_API_ERRORS,
        retry_if=is_retryable_google_error,
    )
    async def _get_job(self, job_id: str) -> dict[str, Any]:
        def fetch() -> dict[str, Any]:
            job = self.client.get_job(
                job_id,
                project=self.config.project_id,
                location=self.config.location,
            )
            # The typed job classes parse parameter values; the raw resource keeps them as strings
            return dict(job._properties)

        return await asyncio.to_thread(fetch)

    @retry_with_exponential_backoff(
        max_retries=3,
        base_delay=1.0,
        max_delay=30.0,
        non_retryable_exceptions=NON_RETRYABLE_API_ERRORS,
        retry_if=is_retryable_google_error,
    )
    async def _list_child_job_ids(self, parent_job_id: str) -> list[str]:
        def fetch() -> list[str]:
            jobs = self.client.list_jobs(
                project=self.config.project_id,
                parent_job=parent_job_id,
            )
            return [job.job_id for job in jobs]

        return await asyncio.to_thread(fetch)

    @retry_with_exponential_backoff(
        max_retries=3,
        base_delay=1.0,
        max_delay=30.0,
        non_retryable_exceptions=NON_RETRYABLE_API_ERRORS,
        retry_if=is_retryable_google_error,
    )
    async def _list_table_ids(self, dataset: DefaultDataset) -> list[str]:
        def fetch() -> list[str]:
            dataset_ref = bigquery.DatasetReference(dataset.project_id, dataset.dataset_id)
            return [table.table_id for table in self.client.list_tables(dataset_ref)]

        return await asyncio.to_thread(fetch)

    def _access_error(self, action: str, error: Exception) -> WarehouseAccessError:
        message = f"Failed to {action}: {self._format_api_error(error)}"
        logger.error(message)
        return WarehouseAccessError(
            message,
            details={"project_id": self.config.project_id, "location": self.config.location},
        )

    def _format_api_error(self, error: Exception) -> str:
        """Format API error with helpful context."""
        error_str = getattr(error, "message", None) or str(error)

        if isinstance(error, google_auth_exceptions.DefaultCredentialsError):
            return (
                f"{error_str}. Set GOOGLE_APPLICATION_CREDENTIALS to a service account key "
                f"or run 'gcloud auth application-default login'."
            )
        if is_permission_error(error):
            return (
                f"{error_str}. Ensure the account has bigquery.jobs.get and "
                f"bigquery.tables.list on project {self.config.project_id}."
            )
        if isinstance(error, google_exceptions.BadRequest):
            return f"{error_str}. Check the project id and location in the job id."
        return error_str
