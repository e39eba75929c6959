"""SQL literal rendering for query parameter values."""

from typing import Callable, Optional

from bq_query_viewer.exceptions import UnsupportedParameterTypeError
from bq_query_viewer.rewriters.base import ParameterType

# Values are not escaped: a STRING containing a quote yields invalid SQL.
VALUE_FORMATTERS: dict[str, Callable[[str], str]] = {
    ParameterType.STRING.value: lambda value: f"'{value}'",
    ParameterType.DATE.value: lambda value: f"date '{value}'",
    ParameterType.INT64.value: lambda value: value,
    ParameterType.BOOL.value: lambda value: value,
}


def is_supported_type(type_tag: str) -> bool:
    """Check whether a type tag has a literal rendering."""
    return type_tag in VALUE_FORMATTERS


def format_value(type_tag: str, raw_value: Optional[str]) -> str:
    """Render a raw string value as a SQL literal of the given type.

    Args:
        type_tag: BigQuery type name (STRING, DATE, INT64, BOOL)
        raw_value: Value as returned by the API, always a string

    Returns:
        SQL literal text. A None value renders as null.

    Raises:
        UnsupportedParameterTypeError: If the type has no rendering
    """
    formatter = VALUE_FORMATTERS.get(type_tag)
    if formatter is None:
        raise UnsupportedParameterTypeError(type_tag)

    if raw_value is None:
        return "null"

    return formatter(raw_value)
