"""Exceptions raised while reconstructing a query from a BigQuery job."""

from typing import Any, Optional


class QueryViewerError(Exception):
    """Base exception for bq-query-viewer."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(message)


class EmptyInputError(QueryViewerError):
    """No job locator was given."""

    def __init__(self) -> None:
        super().__init__(message="Job ID is required!", error_code="EMPTY_INPUT")


class InvalidJobLocatorError(QueryViewerError):
    """The job locator does not match any accepted shape."""

    def __init__(self, text: str):
        super().__init__(
            message=(
                "Invalid input format! Please provide a valid "
                "[Project ID].[Location].[Job ID]."
            ),
            error_code="INVALID_JOB_LOCATOR",
            details={"input": text},
        )


class NotAQueryJobError(QueryViewerError):
    """The job exists but is not a query job (LOAD, COPY, EXTRACT...)."""

    def __init__(self, job_type: Optional[str], job_id: Optional[str] = None):
        super().__init__(
            message="This job is not a query job!",
            error_code="NOT_A_QUERY_JOB",
            details={"job_type": job_type, "job_id": job_id},
        )


class UnsupportedParameterTypeError(QueryViewerError):
    """A parameter type has no SQL literal rendering."""

    def __init__(self, type_tag: Any, parameter_name: Optional[str] = None):
        self.type_tag = type_tag
        self.parameter_name = parameter_name
        super().__init__(
            message=f"Parameter Type Not Supported: {type_tag}",
            error_code="UNSUPPORTED_PARAMETER_TYPE",
            details={"type": type_tag, "parameter": parameter_name},
        )


class JobNotFoundError(QueryViewerError):
    """BigQuery has no job with this id in the given project and location."""

    def __init__(self, job_id: str, project_id: str, location: Optional[str]):
        super().__init__(
            message=f"Job not found: {project_id}.{location}.{job_id}",
            error_code="JOB_NOT_FOUND",
            details={"job_id": job_id, "project_id": project_id, "location": location},
        )


class WarehouseAccessError(QueryViewerError):
    """BigQuery rejected a request (permissions, bad request, exhausted retries)."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="WAREHOUSE_ACCESS_ERROR",
            details=details,
        )
