"""Inline substitution of @name placeholders with their bound values."""

import logging
import re
from typing import Iterable

from bq_query_viewer.exceptions import UnsupportedParameterTypeError
from bq_query_viewer.rewriters.base import (
    ArrayParameter,
    Parameter,
    ParameterKind,
    ScalarParameter,
)
from bq_query_viewer.rewriters.values import format_value, is_supported_type

logger = logging.getLogger(__name__)

NULL_LITERAL = "null"


def placeholder_pattern(name: str) -> re.Pattern[str]:
    """Match @name as a whole word, case-sensitively."""
    return re.compile(rf"@\b{name}\b")


def trace_text(name: str, literal: str) -> str:
    """Append the provenance comment to a rendered literal."""
    return f"{literal} /* = @{name} */"


def _replace_all(query: str, name: str, replacement: str) -> str:
    # A callable replacement keeps backslashes in values literal.
    return placeholder_pattern(name).sub(lambda _match: replacement, query)


def _substitute_scalar(query: str, parameter: ScalarParameter) -> str:
    if parameter.value is None:
        return _replace_all(query, parameter.name, NULL_LITERAL)

    literal = format_value(parameter.type_tag, parameter.value)
    return _replace_all(query, parameter.name, trace_text(parameter.name, literal))


def _substitute_array(query: str, parameter: ArrayParameter) -> str:
    if parameter.values is None:
        return _replace_all(query, parameter.name, NULL_LITERAL)

    # Checked up front so an empty array of an unknown type is still rejected
    if not is_supported_type(parameter.element_type_tag):
        raise UnsupportedParameterTypeError(parameter.element_type_tag, parameter.name)

    elements = ", ".join(
        format_value(parameter.element_type_tag, value) for value in parameter.values
    )
    return _replace_all(query, parameter.name, trace_text(parameter.name, f"[{elements}]"))


def substitute_parameter(query: str, parameter: Parameter) -> str:
    """Replace every placeholder of one parameter.

    Raises:
        UnsupportedParameterTypeError: If a bound value has an unknown type
    """
    if parameter.kind is ParameterKind.ARRAY:
        return _substitute_array(query, parameter)  # type: ignore[arg-type]
    return _substitute_scalar(query, parameter)  # type: ignore[arg-type]


def substitute_parameters(query: str, parameters: Iterable[Parameter]) -> str:
    """Replace placeholders for all parameters, in order.

    Parameters whose type cannot be rendered are left in place; callers
    report them via unsupported_parameters.

    Placeholders without a parameter, and parameters without a placeholder,
    are ignored.
    """
    for parameter in parameters:
        try:
            query = substitute_parameter(query, parameter)
        except UnsupportedParameterTypeError as e:
            logger.debug(f"{e.message} (@{parameter.name} left unsubstituted)")
    return query


def parameter_type_tag(parameter: Parameter) -> str:
    """Get the type tag that drives rendering (element type for arrays)."""
    if parameter.kind is ParameterKind.ARRAY:
        return parameter.element_type_tag  # type: ignore[union-attr]
    return parameter.type_tag  # type: ignore[union-attr]


def unsupported_parameters(parameters: Iterable[Parameter]) -> list[Parameter]:
    """List bound parameters that substitute_parameters will leave untouched."""
    return [
        p
        for p in parameters
        if p.is_bound and not is_supported_type(parameter_type_tag(p))
    ]
