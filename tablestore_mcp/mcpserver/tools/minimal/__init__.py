"""Minimal toolset: generic ``search`` and ``fetch`` for connector clients."""

from . import fetch, search  # noqa: F401

TOOLS = [search.SPEC, fetch.SPEC]

__all__ = ["TOOLS", "fetch", "search"]
