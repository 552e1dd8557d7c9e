"""
Input validation utilities for the silver pipeline.

Guards the values that reach dynamic SQL (schema, table and column names)
and the command line (input directories, exception-rate thresholds).
"""

import re
from pathlib import Path


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# PostgreSQL truncates longer names silently
MAX_IDENTIFIER_LENGTH = 63

RESERVED_KEYWORDS = frozenset({
    "all", "alter", "and", "create", "delete", "drop", "from", "grant", "index",
    "insert", "or", "revoke", "select", "table", "truncate", "update", "user",
    "view", "where",
})


def sanitize_sql_identifier(identifier: str, field_name: str = "identifier") -> str:
    """
    Check that a schema, table or column name is safe to interpolate.

    Args:
        identifier: Name taken from configuration
        field_name: Label used in error messages

    Returns:
        The identifier without surrounding whitespace

    Raises:
        ValidationError: If the name is empty, too long, a keyword, or not a plain identifier

    Examples:
        >>> sanitize_sql_identifier(" dim_customers ")
        'dim_customers'
    """
    if not isinstance(identifier, str) or not identifier.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")

    name = identifier.strip()
    if not _IDENTIFIER.match(name):
        raise ValidationError(
            f"{field_name} '{name}' must start with a letter or underscore "
            "and contain only letters, digits and underscores"
        )
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"{field_name} is longer than {MAX_IDENTIFIER_LENGTH} characters")
    if name.lower() in RESERVED_KEYWORDS:
        raise ValidationError(f"{field_name} '{name}' is a reserved SQL keyword")
    return name


def qualified_table(schema: str, table: str) -> str:
    """
    Join a schema and a table name after checking both.

    Examples:
        >>> qualified_table("silver", "dq_exceptions")
        'silver.dq_exceptions'
    """
    return f"{sanitize_sql_identifier(schema, 'schema')}.{sanitize_sql_identifier(table, 'table')}"


def validate_directory(path: str, field_name: str = "input_dir", must_exist: bool = False) -> str:
    """
    Validate a directory given on the command line.

    Args:
        path: Directory path
        field_name: Label used in error messages
        must_exist: Also require the directory to exist

    Returns:
        The path stripped of whitespace

    Raises:
        ValidationError: If the path is blank, holds wildcards or null bytes, or is missing
    """
    if not isinstance(path, str) or not path.strip():
        raise ValidationError(f"{field_name} must be a non-empty path")

    path = path.strip()
    if "\x00" in path:
        raise ValidationError(f"{field_name} contains null bytes")
    if any(ch in path for ch in "*?["):
        raise ValidationError(f"{field_name} must name one directory, not a pattern")
    if must_exist and not Path(path).is_dir():
        raise ValidationError(f"{field_name} '{path}' is not an existing directory")
    return path


def exception_rate(value: str) -> float:
    """
    Parse an exception-rate threshold between 0 and 1.

    Suitable as an argparse ``type``; raises ValueError so argparse reports
    the bad value.

    Examples:
        >>> exception_rate("0.05")
        0.05
    """
    rate = float(value)
    if not 0.0 <= rate <= 1.0:
        raise ValidationError(f"exception rate must be between 0 and 1, got {value}")
    return rate
