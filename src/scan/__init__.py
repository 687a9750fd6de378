"""Workspace scanning for source and SQL files."""

from scan.files import PRUNED_DIRS, find_files, find_source_files
from scan.sql_files import SqlFileLocator

__all__ = ["PRUNED_DIRS", "SqlFileLocator", "find_files", "find_source_files"]
