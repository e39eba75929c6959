"""Pytest configuration and fixtures."""

from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from bq_query_viewer.config import Settings


def get_test_settings() -> Settings:
    """Override settings for testing."""
    return Settings(
        environment="test",
        log_level="WARNING",
        google_application_credentials=None,
        child_job_concurrency=4,
    )


def make_query_job(
    query: str,
    job_id: str = "job123",
    default_dataset: Optional[tuple[str, str]] = ("proj", "sales"),
    parameters: Optional[list[dict[str, Any]]] = None,
    referenced_tables: Optional[list[tuple[str, str, str]]] = None,
    job_type: str = "QUERY",
) -> dict[str, Any]:
    """Build a REST job resource the way jobs.get returns it."""
    query_config: dict[str, Any] = {"query": query}
    if default_dataset is not None:
        query_config["defaultDataset"] = {
            "projectId": default_dataset[0],
            "datasetId": default_dataset[1],
        }
    if parameters is not None:
        query_config["queryParameters"] = parameters

    resource: dict[str, Any] = {
        "jobReference": {"projectId": "proj", "jobId": job_id, "location": "us"},
        "configuration": {"jobType": job_type, "query": query_config},
        "statistics": {"query": {}},
    }
    if referenced_tables is not None:
        resource["statistics"]["query"]["referencedTables"] = [
            {"projectId": p, "datasetId": d, "tableId": t} for p, d, t in referenced_tables
        ]
    return resource


def scalar_param(name: str, type_: str, value: Optional[str]) -> dict[str, Any]:
    """Build a scalar queryParameters entry; value=None omits parameterValue."""
    raw: dict[str, Any] = {"name": name, "parameterType": {"type": type_}}
    if value is not None:
        raw["parameterValue"] = {"value": value}
    return raw


def array_param(name: str, element_type: str, values: Optional[list[str]]) -> dict[str, Any]:
    """Build an array queryParameters entry; values=None omits parameterValue."""
    raw: dict[str, Any] = {
        "name": name,
        "parameterType": {"type": "ARRAY", "arrayType": {"type": element_type}},
    }
    if values is not None:
        raw["parameterValue"] = {"arrayValues": [{"value": v} for v in values]}
    return raw


class FakeJobClient:
    """In-memory stand-in for BigQueryJobClient."""

    def __init__(
        self,
        jobs: dict[str, dict[str, Any]],
        children: Optional[dict[str, list[str]]] = None,
        tables: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.jobs = jobs
        self.children = children or {}
        self.tables = tables or {}
        self.get_job = AsyncMock(side_effect=lambda job_id: self.jobs[job_id])
        self.list_child_job_ids = AsyncMock(
            side_effect=lambda parent: list(self.children.get(parent, []))
        )
        self.list_table_ids = AsyncMock(
            side_effect=lambda dataset: list(self.tables.get(dataset.full_id, []))
        )
        self.close = MagicMock()


@pytest.fixture
def test_settings() -> Settings:
    return get_test_settings()


@pytest.fixture
def client_factory():
    """Return a factory that hands out one FakeJobClient and records its configs."""

    def build(fake: FakeJobClient):
        configs = []

        def factory(config):
            configs.append(config)
            return fake

        factory.configs = configs
        return factory

    return build


@pytest.fixture
def query_job():
    """Builder for raw query job resources."""
    return make_query_job


@pytest.fixture
def scalar():
    """Builder for raw scalar parameters."""
    return scalar_param


@pytest.fixture
def array():
    """Builder for raw array parameters."""
    return array_param


@pytest.fixture
def fake_client():
    """Builder for FakeJobClient instances."""
    return FakeJobClient
