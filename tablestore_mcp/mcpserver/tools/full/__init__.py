"""Full toolset: CRUD and schema tools over bases, tables, fields and records."""

from . import bases, fields, records, tables  # noqa: F401

_ORDER = [
    "list_bases",
    "list_tables",
    "describe_table",
    "list_records",
    "search_records",
    "get_record",
    "create_record",
    "update_records",
    "delete_records",
    "create_table",
    "update_table",
    "create_field",
    "update_field",
]

_BY_NAME = {spec.name: spec for spec in [*bases.SPECS, *tables.SPECS, *records.SPECS, *fields.SPECS]}

TOOLS = [_BY_NAME[name] for name in _ORDER]

__all__ = ["TOOLS", "bases", "fields", "records", "tables"]
