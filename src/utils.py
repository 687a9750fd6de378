"""Shared utilities for sqlbind."""

from __future__ import annotations

DEFAULT_SQL_EXTENSION = ".sql"


def key_to_relative_path(key: str, extension: str = DEFAULT_SQL_EXTENSION) -> str:
    """Convert a dotted SQL key to the POSIX relative path it names.

    Args:
        key: Dotted key as written at the call site (e.g., "users.findById")
        extension: Suffix appended to the last segment

    Returns:
        Relative path (e.g., "users/findById.sql")

    Examples:
        >>> key_to_relative_path("users.findById")
        'users/findById.sql'
        >>> key_to_relative_path("reports.monthly.totals", ".pgsql")
        'reports/monthly/totals.pgsql'
        >>> key_to_relative_path("health")
        'health.sql'
    """
    normalized_parts = [part for part in key.strip().split(".") if part]
    return "/".join(normalized_parts) + extension


def path_matches_key(relative_path: str, key_path: str) -> bool:
    """Return True when ``relative_path`` ends with ``key_path`` on a segment boundary.

    Examples:
        >>> path_matches_key("db/users/findById.sql", "users/findById.sql")
        True
        >>> path_matches_key("db/allusers/findById.sql", "users/findById.sql")
        False
    """
    if not key_path:
        return False
    if relative_path == key_path:
        return True
    return relative_path.endswith("/" + key_path)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return singular
    return plural if plural is not None else f"{singular}s"
