"""Text rewriting of BigQuery job queries."""

from bq_query_viewer.rewriters.base import (
    ArrayParameter,
    DefaultDataset,
    JobLocator,
    JobMetadata,
    Parameter,
    ParameterKind,
    ParameterType,
    ScalarParameter,
    TableRef,
)
from bq_query_viewer.rewriters.normalizer import (
    filter_default_dataset_tables,
    merge_child_tables,
    normalize_job_metadata,
    normalize_parameter,
)
from bq_query_viewer.rewriters.parameters import (
    substitute_parameter,
    substitute_parameters,
    unsupported_parameters,
)
from bq_query_viewer.rewriters.tables import qualify_table, qualify_tables
from bq_query_viewer.rewriters.values import format_value, is_supported_type

__all__ = [
    # Data model
    "ArrayParameter",
    "DefaultDataset",
    "JobLocator",
    "JobMetadata",
    "Parameter",
    "ParameterKind",
    "ParameterType",
    "ScalarParameter",
    "TableRef",
    # Value formatting
    "format_value",
    "is_supported_type",
    # Parameter substitution
    "substitute_parameter",
    "substitute_parameters",
    "unsupported_parameters",
    # Table qualification
    "qualify_table",
    "qualify_tables",
    # Normalization
    "normalize_job_metadata",
    "normalize_parameter",
    "merge_child_tables",
    "filter_default_dataset_tables",
]
