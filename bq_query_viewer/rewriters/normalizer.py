"""Normalization of BigQuery job resources into JobMetadata.

The input is the REST `Job` resource as returned by `jobs.get`
(camelCase keys). Only the parts needed to rebuild the query are read:

    configuration.jobType
    configuration.query.defaultDataset
    configuration.query.query
    configuration.query.queryParameters
    statistics.query.referencedTables
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from bq_query_viewer.exceptions import NotAQueryJobError
from bq_query_viewer.rewriters.base import (
    ArrayParameter,
    DefaultDataset,
    JobMetadata,
    Parameter,
    ScalarParameter,
    TableRef,
)

logger = logging.getLogger(__name__)

QUERY_JOB_TYPE = "QUERY"
ARRAY_TYPE = "ARRAY"


def job_type(raw_job: Mapping[str, Any]) -> Optional[str]:
    """Get configuration.jobType from a job resource."""
    return (raw_job.get("configuration") or {}).get("jobType")


def job_id(raw_job: Mapping[str, Any]) -> Optional[str]:
    """Get jobReference.jobId from a job resource."""
    return (raw_job.get("jobReference") or {}).get("jobId")


def is_query_job(raw_job: Mapping[str, Any]) -> bool:
    return job_type(raw_job) == QUERY_JOB_TYPE


def normalize_parameter(raw: Mapping[str, Any]) -> Parameter:
    """Convert one queryParameters entry.

    BigQuery does not always return parameterValue (e.g. for parameters bound
    to NULL). A missing payload becomes the unbound sentinel None.
    """
    name = raw["name"]
    parameter_type = raw.get("parameterType") or {}
    payload = raw.get("parameterValue")

    if parameter_type.get("type") == ARRAY_TYPE:
        element_type = (parameter_type.get("arrayType") or {}).get("type", "")
        array_values = None if payload is None else payload.get("arrayValues")
        if array_values is None and payload is not None:
            # An empty array comes back as a payload without arrayValues
            array_values = []
        values = (
            None
            if array_values is None
            else tuple(item.get("value") for item in array_values)
        )
        return ArrayParameter(name=name, element_type_tag=element_type, values=values)

    value = None if payload is None else payload.get("value")
    return ScalarParameter(name=name, type_tag=parameter_type.get("type", ""), value=value)


def normalize_table(raw: Mapping[str, Any]) -> TableRef:
    """Convert one referencedTables entry."""
    return TableRef(
        project_id=raw["projectId"],
        dataset_id=raw["datasetId"],
        table_id=raw["tableId"],
    )


def normalize_job_metadata(raw_job: Mapping[str, Any]) -> JobMetadata:
    """Build JobMetadata from a raw job resource.

    Raises:
        NotAQueryJobError: If the job is not a QUERY job
    """
    if not is_query_job(raw_job):
        raise NotAQueryJobError(job_type(raw_job), job_id(raw_job))

    query_config = raw_job["configuration"].get("query") or {}
    query_stats = (raw_job.get("statistics") or {}).get("query") or {}

    raw_dataset = query_config.get("defaultDataset")
    default_dataset = (
        DefaultDataset(
            project_id=raw_dataset["projectId"],
            dataset_id=raw_dataset["datasetId"],
        )
        if raw_dataset
        else None
    )

    parameters = tuple(
        normalize_parameter(p) for p in query_config.get("queryParameters") or []
    )
    tables = tuple(
        normalize_table(t) for t in query_stats.get("referencedTables") or []
    )

    return JobMetadata(
        query_text=query_config.get("query", ""),
        default_dataset=default_dataset,
        parameters=parameters,
        referenced_tables=tables,
    )


def merge_child_tables(
    primary: Iterable[TableRef],
    children: Iterable[Iterable[TableRef]],
) -> tuple[TableRef, ...]:
    """Add child job tables to the parent job's table list.

    A child table is skipped when its dataset is transient or when a table
    with the same table_id is already in the list. The key is table_id only:
    two tables with the same name in different datasets collide.
    """
    merged = list(primary)
    seen = {table.table_id for table in merged}

    for child_tables in children:
        for table in child_tables:
            if table.is_transient:
                continue
            if table.table_id in seen:
                continue
            merged.append(table)
            seen.add(table.table_id)

    return tuple(merged)


def filter_default_dataset_tables(
    tables: Iterable[TableRef],
    default_table_ids: Iterable[str],
) -> tuple[TableRef, ...]:
    """Keep tables that can appear unqualified in the query.

    Only tables listed in the default dataset can be written without a
    dataset; anything else is already fully qualified in the query text.
    """
    listed = set(default_table_ids)
    kept: list[TableRef] = []
    dropped: list[str] = []

    for table in tables:
        if not table.is_transient and table.table_id in listed:
            kept.append(table)
        else:
            dropped.append(table.full_id)

    if dropped:
        logger.debug(f"Dropped tables outside the default dataset: {', '.join(dropped)}")

    return tuple(kept)
