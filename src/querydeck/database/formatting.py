"""Database result formatting for AI consumption."""

import json
from typing import Any

from ..models import DatabaseSchema, GenericValue, QueryResult

RESULT_SEPARATOR = "=" * 80
ROW_SEPARATOR = "-" * 80


def format_value(value: GenericValue) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_query_result(result: QueryResult, query: str, database_name: str = "unknown") -> str:
    """Format a query result as plain text for AI consumption.

    Formats results in a structured, readable format optimized for LLM analysis:
    - Clear section headers with separators
    - Column-aligned tabular format
    - Row numbers for reference
    - Summary statistics

    Args:
        result: Query result to render
        query: The original query that produced these results
        database_name: Name of the database (for context)

    Returns:
        Plain text formatted results with clear separators
    """
    if not result.row_count:
        return (
            f"{RESULT_SEPARATOR}\n"
            f"DATABASE QUERY RESULTS\n"
            f"{RESULT_SEPARATOR}\n"
            f"Database: {database_name}\n"
            f"Query: {query}\n"
            f"Result: No rows returned (empty result set)\n"
            f"{RESULT_SEPARATOR}\n"
        )

    cells = [[format_value(value) for value in row] for row in result.rows]

    # Calculate column widths for alignment (by position, names may repeat)
    col_widths = [len(column) for column in result.columns]
    for row in cells:
        for index, value in enumerate(row):
            col_widths[index] = max(col_widths[index], len(value))

    # Build header
    output = [
        RESULT_SEPARATOR,
        "DATABASE QUERY RESULTS",
        RESULT_SEPARATOR,
        f"Database: {database_name}",
        f"Query: {query}",
        f"Rows returned: {result.row_count}",
        "",
        ROW_SEPARATOR,
    ]

    # Build column headers
    header_parts = ["Row#"]
    for index, column in enumerate(result.columns):
        header_parts.append(column.ljust(col_widths[index]))
    output.append("  ".join(header_parts).rstrip())
    output.append(ROW_SEPARATOR)

    # Build data rows
    for row_number, row in enumerate(cells, start=1):
        row_parts = [f"{row_number:4d}"]
        for index, value in enumerate(row):
            row_parts.append(value.ljust(col_widths[index]))
        output.append("  ".join(row_parts).rstrip())

    # Footer
    output.extend([
        ROW_SEPARATOR,
        f"Total rows: {result.row_count}",
        RESULT_SEPARATOR,
        "",
    ])

    return "\n".join(output)


def format_schema(schema: DatabaseSchema, database_name: str = "unknown") -> str:
    """Format a database schema as plain text, one block per table.

    Each column line reads ``name  type  NULL|NOT NULL  [PK]``.
    """
    output = [
        RESULT_SEPARATOR,
        "DATABASE SCHEMA",
        RESULT_SEPARATOR,
        f"Database: {database_name}",
        f"Tables: {len(schema.tables)}",
    ]

    for table in schema.tables:
        output.extend([ROW_SEPARATOR, f"Table: {table.name} ({len(table.columns)} columns)"])
        if not table.columns:
            output.append("  (no columns)")
            continue

        name_width = max(len(column.name) for column in table.columns)
        type_width = max(len(column.data_type) for column in table.columns)
        for column in table.columns:
            nullable = "NULL" if column.is_nullable else "NOT NULL"
            line = f"  {column.name.ljust(name_width)}  {column.data_type.ljust(type_width)}  {nullable}"
            if column.is_primary_key:
                line += "  PK"
            output.append(line.rstrip())

    output.extend([RESULT_SEPARATOR, ""])
    return "\n".join(output)


def format_name_list(title: str, names: list[str]) -> str:
    """Format a list of database or table names."""
    output = [f"{title} ({len(names)}):"]
    output.extend(f"  - {name}" for name in names)
    return "\n".join(output)


def format_json(payload: Any) -> str:
    """Serialize a model (anything with ``to_dict``) or plain data as JSON."""
    if hasattr(payload, "to_dict"):
        payload = payload.to_dict()
    return json.dumps(payload, indent=2, ensure_ascii=False)
