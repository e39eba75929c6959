"""Services orchestrating job fetches and query rewriting."""

from bq_query_viewer.services.reconstruction import (
    QueryReconstructionService,
    ReconstructionResult,
    parse_job_locator,
    render_header,
)

__all__ = [
    "QueryReconstructionService",
    "ReconstructionResult",
    "parse_job_locator",
    "render_header",
]
