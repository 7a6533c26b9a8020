"""MCP server exposing a tabular record store (bases, tables, fields, records)."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
