"""Reconstruction of a runnable SQL document from a BigQuery job."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from bq_query_viewer.clients.bigquery_config import BigQueryClientConfig
from bq_query_viewer.config import Settings, get_settings
from bq_query_viewer.exceptions import EmptyInputError, InvalidJobLocatorError
from bq_query_viewer.rewriters.base import (
    ArrayParameter,
    DefaultDataset,
    JobLocator,
    JobMetadata,
    Parameter,
    ParameterKind,
    ScalarParameter,
    TableRef,
)
from bq_query_viewer.rewriters.normalizer import (
    filter_default_dataset_tables,
    is_query_job,
    job_type,
    merge_child_tables,
    normalize_job_metadata,
)
from bq_query_viewer.rewriters.parameters import (
    parameter_type_tag,
    substitute_parameters,
    unsupported_parameters,
)
from bq_query_viewer.rewriters.tables import qualify_tables

logger = logging.getLogger(__name__)

LOCATOR_EXAMPLE = "your-project-id.asia-northeast1.job_MguwKgVHkZxlZs0CZxP7icPLJrkB"


class JobClient(Protocol):
    """What the reconstruction needs from a warehouse client."""

    async def get_job(self, job_id: str) -> dict[str, Any]: ...

    async def list_child_job_ids(self, parent_job_id: str) -> list[str]: ...

    async def list_table_ids(self, dataset: DefaultDataset) -> list[str]: ...

    def close(self) -> None: ...


ClientFactory = Callable[[BigQueryClientConfig], JobClient]


def default_client_factory(config: BigQueryClientConfig) -> JobClient:
    from bq_query_viewer.clients.bigquery_client import BigQueryJobClient

    return BigQueryJobClient(config)


def parse_job_locator(text: str) -> JobLocator:
    """Parse a job id as shown in the BigQuery console.

    Accepts `project.location.job` and `project:location.job`.

    Raises:
        InvalidJobLocatorError: For any other shape
    """
    stripped = text.strip()
    elements = stripped.split(".")

    if len(elements) == 2:
        project_and_location = elements[0].split(":")
        if len(project_and_location) != 2:
            raise InvalidJobLocatorError(text)
        project_id, location = project_and_location
        job_id = elements[1]
    elif len(elements) == 3:
        project_id, location, job_id = elements
    else:
        raise InvalidJobLocatorError(text)

    if not (project_id and location and job_id):
        raise InvalidJobLocatorError(text)

    return JobLocator(project_id=project_id, location=location, job_id=job_id)


def render_parameter(parameter: Parameter) -> str:
    """Render `name: value` for the document header."""
    if parameter.kind is ParameterKind.ARRAY:
        array: ArrayParameter = parameter  # type: ignore[assignment]
        if array.values is None:
            return f"{array.name}: null"
        values = ", ".join("null" if v is None else v for v in array.values)
        return f"{array.name}: {values}"

    scalar: ScalarParameter = parameter  # type: ignore[assignment]
    return f"{scalar.name}: {'null' if scalar.value is None else scalar.value}"


def render_header(job_input: str, metadata: JobMetadata) -> str:
    """Render the comment block that precedes the rewritten query."""
    dataset = metadata.default_dataset.full_id if metadata.default_dataset else "null"
    parameters = "\n  ".join(render_parameter(p) for p in metadata.parameters)
    return (
        "/*\n"
        f"Job: {job_input}\n"
        f"Default Dataset: {dataset}\n"
        "Parameters:\n"
        f"  {parameters}\n"
        "*/"
    )


@dataclass
class ReconstructionResult:
    """Outcome of rebuilding one job's query."""

    job_input: str
    locator: JobLocator
    metadata: JobMetadata
    query: str
    header: str
    qualified_tables: tuple[TableRef, ...] = ()
    child_job_count: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def document(self) -> str:
        """Header and rewritten query, separated by a blank line."""
        return "\n\n".join([self.header, self.query])


class QueryReconstructionService:
    """Rebuilds the SQL of a finished query job.

    Fetches the job, its child jobs and the default dataset listing, then
    substitutes parameters and qualifies table names.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client_factory = client_factory or default_client_factory

    async def build_annotated_query(self, job_input: str) -> str:
        """Get the annotated SQL document for a job id."""
        result = await self.reconstruct(job_input)
        return result.document

    async def reconstruct(self, job_input: Optional[str]) -> ReconstructionResult:
        """Rebuild the query of a job.

        Args:
            job_input: Job id in `project.location.job` or `project:location.job` form

        Raises:
            EmptyInputError: If no job id is given
            InvalidJobLocatorError: If the job id is malformed
            NotAQueryJobError: If the job is not a query job
        """
        if not job_input or not job_input.strip():
            raise EmptyInputError()

        job_input = job_input.strip()
        locator = parse_job_locator(job_input)
        client = self.client_factory(BigQueryClientConfig.from_locator(locator, self.settings))

        try:
            return await self._reconstruct(job_input, locator, client)
        finally:
            client.close()

    async def _reconstruct(
        self, job_input: str, locator: JobLocator, client: JobClient
    ) -> ReconstructionResult:
        warnings: list[str] = []

        logger.info(f"Fetching job {locator.job_id}...")
        raw_job = await client.get_job(locator.job_id)
        metadata = normalize_job_metadata(raw_job)

        child_job_ids = await client.list_child_job_ids(locator.job_id)
        child_tables = await self._fetch_child_tables(client, child_job_ids, warnings)

        tables = merge_child_tables(metadata.referenced_tables, child_tables)

        if metadata.default_dataset is not None:
            default_table_ids = await client.list_table_ids(metadata.default_dataset)
            tables = filter_default_dataset_tables(tables, default_table_ids)
        else:
            # Nothing can resolve against a missing default dataset
            tables = ()

        logger.info(
            f"Job {locator.job_id}: {len(metadata.parameters)} parameters, "
            f"{len(child_job_ids)} child jobs, {len(tables)} tables to qualify"
        )

        for parameter in unsupported_parameters(metadata.parameters):
            warnings.append(
                f"Parameter Type Not Supported: {parameter_type_tag(parameter)} "
                f"(@{parameter.name} left unsubstituted)"
            )

        query = substitute_parameters(metadata.query_text, metadata.parameters)
        query = qualify_tables(query, tables, quote=self.settings.identifier_quote)

        return ReconstructionResult(
            job_input=job_input,
            locator=locator,
            metadata=metadata,
            query=query,
            header=render_header(job_input, metadata),
            qualified_tables=tables,
            child_job_count=len(child_job_ids),
            warnings=warnings,
        )

    async def _fetch_child_tables(
        self, client: JobClient, child_job_ids: list[str], warnings: list[str]
    ) -> list[tuple[TableRef, ...]]:
        """Fetch child jobs concurrently and return their referenced tables in order."""
        if not child_job_ids:
            return []

        semaphore = asyncio.Semaphore(self.settings.child_job_concurrency)

        async def fetch(child_job_id: str) -> dict[str, Any]:
            async with semaphore:
                return await client.get_job(child_job_id)

        # Every fetch settles before the first failure propagates and the client is closed
        raw_children = await asyncio.gather(
            *(fetch(job_id) for job_id in child_job_ids), return_exceptions=True
        )
        for raw_child in raw_children:
            if isinstance(raw_child, BaseException):
                raise raw_child

        child_tables = []
        for child_job_id, raw_child in zip(child_job_ids, raw_children):
            if not is_query_job(raw_child):
                warnings.append(
                    f"Skipped child job {child_job_id}: not a query job ({job_type(raw_child)})"
                )
                continue
            child_tables.append(normalize_job_metadata(raw_child).referenced_tables)

        return child_tables
