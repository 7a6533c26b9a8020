"""Table tools: list, describe, create and update tables."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field as PydanticField

from ....errors import NotFoundError
from ....store.models import Table
from ..base import ToolArgs, ToolContext, ToolSpec
from .fields import FieldDefinition

DetailLevel = Literal["tableIdentifiersOnly", "identifiersOnly", "full"]

_DETAIL_DESCRIPTION = (
    "tableIdentifiersOnly: table id and name only. "
    "identifiersOnly: table id/name plus field and view ids/names. "
    "full: complete field and view definitions (default)."
)


def shape_table(table: Table, detail_level: DetailLevel = "full") -> Dict[str, Any]:
    """Expose only the keys allowed by *detail_level*."""

    if detail_level == "tableIdentifiersOnly":
        return {"id": table.id, "name": table.name}
    if detail_level == "identifiersOnly":
        return {
            "id": table.id,
            "name": table.name,
            "fields": [{"id": field.id, "name": field.name} for field in table.fields],
            "views": [{"id": view.id, "name": view.name} for view in table.views],
        }
    payload: Dict[str, Any] = {"id": table.id, "name": table.name}
    if table.description is not None:
        payload["description"] = table.description
    payload["fields"] = [field.model_dump(exclude_none=True) for field in table.fields]
    payload["views"] = [view.model_dump(exclude_none=True) for view in table.views]
    return payload


class ListTablesArgs(ToolArgs):
    baseId: str
    detailLevel: DetailLevel = PydanticField(default="full", description=_DETAIL_DESCRIPTION)


class DescribeTableArgs(ToolArgs):
    baseId: str
    tableId: str
    detailLevel: DetailLevel = PydanticField(default="full", description=_DETAIL_DESCRIPTION)


class CreateTableArgs(ToolArgs):
    baseId: str
    name: str = PydanticField(min_length=1)
    description: Optional[str] = None
    fields: List[FieldDefinition] = PydanticField(min_length=1)


class UpdateTableArgs(ToolArgs):
    baseId: str
    tableId: str
    name: Optional[str] = PydanticField(default=None, min_length=1)
    description: Optional[str] = None


async def list_tables(ctx: ToolContext, args: ListTablesArgs) -> List[Dict[str, Any]]:
    schema = await ctx.client.get_base_schema(args.baseId)
    return [shape_table(table, args.detailLevel) for table in schema.tables]


async def describe_table(ctx: ToolContext, args: DescribeTableArgs) -> Dict[str, Any]:
    schema = await ctx.client.get_base_schema(args.baseId)
    table = schema.find_table(args.tableId)
    if table is None:
        raise NotFoundError(f"Table {args.tableId} not found in base {args.baseId}")
    return shape_table(table, args.detailLevel)


async def create_table(ctx: ToolContext, args: CreateTableArgs) -> Dict[str, Any]:
    table = await ctx.client.create_table(
        args.baseId,
        args.name,
        [field.model_dump(exclude_none=True) for field in args.fields],
        args.description,
    )
    return shape_table(table)


async def update_table(ctx: ToolContext, args: UpdateTableArgs) -> Dict[str, Any]:
    if args.name is None and args.description is None:
        raise ValueError("Provide at least one of name or description to update")
    table = await ctx.client.update_table(
        args.baseId, args.tableId, {"name": args.name, "description": args.description}
    )
    return shape_table(table)


SPECS = [
    ToolSpec(
        name="list_tables",
        description="List all tables in a specific base",
        args_model=ListTablesArgs,
        handler=list_tables,
    ),
    ToolSpec(
        name="describe_table",
        description="Get detailed information about a specific table",
        args_model=DescribeTableArgs,
        handler=describe_table,
    ),
    ToolSpec(
        name="create_table",
        description="Create a new table in a base",
        args_model=CreateTableArgs,
        handler=create_table,
    ),
    ToolSpec(
        name="update_table",
        description="Update a table's name or description",
        args_model=UpdateTableArgs,
        handler=update_table,
    ),
]
