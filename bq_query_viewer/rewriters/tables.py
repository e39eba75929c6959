"""Qualification of bare table names against the default dataset."""

import re
from typing import Iterable

from bq_query_viewer.rewriters.base import TableRef


def table_pattern(table_id: str) -> re.Pattern[str]:
    """Match a bare table id that is not already preceded by a dot.

    The preceding character (or start of string) is captured so it can be
    re-emitted. The table id is used as-is, without escaping.
    """
    return re.compile(rf"(^|[^.]\b){table_id}\b")


def qualified_name(table: TableRef, quote: str = "`") -> str:
    """Render the quoted project.dataset.table identifier."""
    return f"{quote}{table.full_id}{quote}"


def qualify_table(query: str, table: TableRef, quote: str = "`") -> str:
    """Rewrite every bare occurrence of one table id."""
    replacement = qualified_name(table, quote)
    return table_pattern(table.table_id).sub(
        lambda match: f"{match.group(1)}{replacement}", query
    )


def qualify_tables(query: str, tables: Iterable[TableRef], quote: str = "`") -> str:
    """Rewrite bare occurrences of each table id, in order.

    Already qualified names (`dataset.table`, `project.dataset.table`) are
    left alone, so applying this twice gives the same result as once.
    """
    for table in tables:
        query = qualify_table(query, table, quote)
    return query
