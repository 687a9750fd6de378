"""Exception hierarchy shared across sqlbind packages."""

from __future__ import annotations


class SqlbindError(Exception):
    """Base class for errors raised by sqlbind."""
