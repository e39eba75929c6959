"""Sanity check of reconstructed SQL with sqlglot.

The rewrite engines are purely textual; this parses their output so the user
can see whether the result is valid SQL and whether any table reference is
still missing its dataset.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlglot import exp, parse
from sqlglot.errors import ParseError as SqlglotParseError

logger = logging.getLogger(__name__)


@dataclass
class TableReference:
    """Represents a table reference extracted from SQL."""

    table: str
    dataset: Optional[str] = None
    project: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """Get the dot-joined name as written."""
        return ".".join(part for part in (self.project, self.dataset, self.table) if part)

    @property
    def is_qualified(self) -> bool:
        return self.dataset is not None


@dataclass
class SqlCheckResult:
    """Result of checking a reconstructed query."""

    tables: list[TableReference] = field(default_factory=list)
    statement_count: int = 0
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)

    @property
    def unqualified_tables(self) -> list[TableReference]:
        """Tables still written without a dataset."""
        return [t for t in self.tables if not t.is_qualified]


def extract_table_reference(table_exp: exp.Table) -> TableReference:
    """Extract table reference from sqlglot Table expression."""
    return TableReference(
        table=table_exp.name,
        dataset=table_exp.db or None,
        project=table_exp.catalog or None,
    )


def check_sql(sql: str, dialect: str = "bigquery") -> SqlCheckResult:
    """Parse SQL and collect the tables it reads or writes.

    CTE names are not reported as tables.

    Args:
        sql: SQL script (one or more statements)
        dialect: sqlglot dialect name

    Returns:
        SqlCheckResult
    """
    result = SqlCheckResult()

    if not sql or not sql.strip():
        result.is_valid = False
        result.errors.append("Empty SQL statement")
        return result

    try:
        statements = [s for s in parse(sql, read=dialect) if s is not None]
    except SqlglotParseError as e:
        result.is_valid = False
        result.errors.append(f"SQL parse error: {e}")
        logger.warning(f"Failed to parse SQL: {e}")
        return result

    result.statement_count = len(statements)

    for statement in statements:
        cte_names = {cte.alias_or_name for cte in statement.find_all(exp.CTE)}
        for table in statement.find_all(exp.Table):
            reference = extract_table_reference(table)
            if not reference.is_qualified and reference.table in cte_names:
                continue
            result.tables.append(reference)

    # Remove duplicates while preserving order
    result.tables = list({ref.qualified_name: ref for ref in result.tables}.values())

    return result
