"""Field definitions: shared argument models plus create/update field tools."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import Field as PydanticField

from ..base import ToolArgs, ToolContext, ToolSpec

FieldType = Literal[
    "singleLineText",
    "email",
    "url",
    "multilineText",
    "number",
    "percent",
    "currency",
    "singleSelect",
    "multipleSelects",
    "singleCollaborator",
    "multipleCollaborators",
    "multipleRecordLinks",
    "date",
    "dateTime",
    "phoneNumber",
    "multipleAttachments",
    "checkbox",
    "formula",
    "createdTime",
    "rollup",
    "count",
    "lookup",
    "multipleLookupValues",
    "autoNumber",
    "barcode",
    "rating",
    "richText",
    "duration",
    "lastModifiedTime",
    "button",
    "createdBy",
    "lastModifiedBy",
    "externalSyncSource",
    "aiText",
]


class FieldDefinition(ToolArgs):
    name: str
    type: FieldType
    description: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class CreateFieldArgs(ToolArgs):
    baseId: str
    tableId: str
    field: FieldDefinition


class UpdateFieldArgs(ToolArgs):
    baseId: str
    tableId: str
    fieldId: str
    name: Optional[str] = PydanticField(default=None, min_length=1)
    description: Optional[str] = None


async def create_field(ctx: ToolContext, args: CreateFieldArgs) -> Dict[str, Any]:
    field = await ctx.client.create_field(
        args.baseId, args.tableId, args.field.model_dump(exclude_none=True)
    )
    return field.model_dump(exclude_none=True)


async def update_field(ctx: ToolContext, args: UpdateFieldArgs) -> Dict[str, Any]:
    if args.name is None and args.description is None:
        raise ValueError("Provide at least one of name or description to update")
    field = await ctx.client.update_field(
        args.baseId,
        args.tableId,
        args.fieldId,
        {"name": args.name, "description": args.description},
    )
    return field.model_dump(exclude_none=True)


SPECS = [
    ToolSpec(
        name="create_field",
        description="Create a new field in a table",
        args_model=CreateFieldArgs,
        handler=create_field,
    ),
    ToolSpec(
        name="update_field",
        description="Update a field's name or description",
        args_model=UpdateFieldArgs,
        handler=update_field,
    ),
]
